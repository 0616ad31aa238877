from django.conf import settings
from rest_framework.pagination import LimitOffsetPagination


class CollaborationPagination(LimitOffsetPagination):
    default_limit = settings.COLLAB_PAGE_SIZE
    max_limit = 100
