from django.contrib import admin
from .models import Collaboration, Requirement, Application


class RequirementInline(admin.TabularInline):
    model = Requirement
    extra = 0
    fields = ('role', 'quantity_needed', 'quantity_filled', 'status', 'position')
    readonly_fields = ('quantity_filled',)


@admin.register(Collaboration)
class CollaborationAdmin(admin.ModelAdmin):
    list_display = ('title', 'creator', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('title', 'description', 'creator__username')
    inlines = [RequirementInline]


@admin.register(Requirement)
class RequirementAdmin(admin.ModelAdmin):
    list_display = ('role', 'collaboration', 'quantity_filled', 'quantity_needed', 'status')
    list_filter = ('status',)
    search_fields = ('role', 'collaboration__title')
    # Capacity only moves through the matching services
    readonly_fields = ('quantity_filled',)


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('applicant_name', 'requirement', 'status', 'applied_at', 'decided_at')
    list_filter = ('status',)
    search_fields = ('applicant__username', 'applicant_name', 'requirement__role')
    readonly_fields = ('requirement', 'applicant', 'applicant_name', 'message', 'applied_at', 'decided_at')
