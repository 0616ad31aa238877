# collaborations/tests/helpers.py
from django.contrib.auth import get_user_model

from collaborations.models import Application, Collaboration, Requirement

User = get_user_model()


def make_user(username, **extra):
    extra.setdefault("email", f"{username}@example.com")
    return User.objects.create_user(username=username, password="pass1234", **extra)


def make_collaboration(creator, title="Wedding Shoot", roles=(("Photographer", 2),)):
    collaboration = Collaboration.objects.create(
        creator=creator,
        title=title,
        description="Two-day shoot in Lisbon",
    )
    for position, (role, needed) in enumerate(roles):
        Requirement.objects.create(
            collaboration=collaboration,
            role=role,
            quantity_needed=needed,
            skills=["Wedding Photography", "Portrait"],
            position=position,
        )
    return collaboration


def make_application(requirement, applicant, status=Application.STATUS_PENDING, message="Keen to join"):
    return Application.objects.create(
        requirement=requirement,
        applicant=applicant,
        applicant_name=applicant.display_name,
        message=message,
        status=status,
    )
