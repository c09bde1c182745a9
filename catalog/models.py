from django.db import models
from accounts.models import Profile


class ServiceCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Service Categories"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }

    def __str__(self):
        return self.name


class Service(models.Model):
    PRICE_UNIT_CHOICES = [
        ('per event', 'Per Event'),
        ('per person', 'Per Person'),
        ('per hour', 'Per Hour'),
        ('per day', 'Per Day'),
    ]

    vendor = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='services')
    category = models.ForeignKey(ServiceCategory, on_delete=models.PROTECT, related_name='services')

    title = models.CharField(max_length=200)
    description = models.TextField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    price_unit = models.CharField(max_length=20, choices=PRICE_UNIT_CHOICES, default='per event')

    # Only needed for bidding; a vendor sees requests in all of their categories
    is_available = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def to_dict(self, with_vendor=False):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": {
                "id": self.category.id,
                "name": self.category.name,
            },
            "price": str(self.price),
            "price_unit": self.price_unit,
            "is_available": self.is_available,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if with_vendor:
            data["vendor"] = {
                "id": self.vendor.id,
                "full_name": self.vendor.full_name,
                "email": self.vendor.email,
                "phone": self.vendor.phone,
            }
        return data

    def __str__(self):
        return f"{self.title} - {self.vendor.full_name}"
