# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_USER = "user"
    ROLE_STUDENT = "student"
    ROLE_EXTERNAL = "external"
    ROLE_PROFESSOR = "professor"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = (
        (ROLE_USER, 'User'),
        (ROLE_STUDENT, 'Student'),
        (ROLE_EXTERNAL, 'External'),
        (ROLE_PROFESSOR, 'Professor'),
        (ROLE_ADMIN, 'Admin'),
    )

    # Roles whose final-phase votes carry extra weight
    PRIVILEGED_ROLES = (ROLE_PROFESSOR, ROLE_ADMIN)

    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_USER,
    )
    is_pre_registered = models.BooleanField(
        default=False,
        help_text="Created by an administrator before the person signed up",
    )

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def is_privileged_voter(self):
        return self.is_superuser or self.role in self.PRIVILEGED_ROLES

    def __str__(self):
        return self.username
