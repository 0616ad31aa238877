# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models

class User(AbstractUser):
    ROLE_CREATOR = "creator"
    ROLE_TALENT = "talent"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = (
        (ROLE_CREATOR, 'Creator'),
        (ROLE_TALENT, 'Talent'),
        (ROLE_ADMIN, 'Admin'),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_TALENT
    )

    bio = models.TextField(blank=True, null=True)
    profile_picture = models.CharField(max_length=1024, blank=True, null=True)
    skills = models.JSONField(default=list, blank=True, help_text="List of creative skills")

    @property
    def display_name(self) -> str:
        """Name shown to collaboration creators: full name, else email, else username."""
        return self.get_full_name() or self.email or self.username

    def __str__(self):
        return self.username
