from django.db import models
from django.contrib.auth.models import User


class Profile(models.Model):
    ROLE_CLIENT = 'client'
    ROLE_VENDOR = 'vendor'
    ROLE_CHOICES = [
        (ROLE_CLIENT, 'Client'),
        (ROLE_VENDOR, 'Vendor'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)

    # Set at signup, never changed afterwards
    role = models.CharField(max_length=10, choices=ROLE_CHOICES)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_client(self):
        return self.role == self.ROLE_CLIENT

    @property
    def is_vendor(self):
        return self.role == self.ROLE_VENDOR

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role,
        }

    def __str__(self):
        return f"{self.full_name} ({self.role})"
