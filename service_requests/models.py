from django.db import models
from accounts.models import Profile
from catalog.models import ServiceCategory


class ServiceRequest(models.Model):
    STATUS_OPEN = 'open'
    STATUS_CLOSED = 'closed'
    STATUS_CHOICES = [
        (STATUS_OPEN, 'Open'),
        (STATUS_CLOSED, 'Closed'),
    ]

    # Who posted it
    client = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='requests')

    # Event details
    event_date = models.DateField()
    event_location = models.CharField(max_length=255)
    budget_min = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    budget_max = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    # open -> closed exactly once, when a bid is awarded
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN)
    awarded_vendor = models.ForeignKey(
        Profile, on_delete=models.SET_NULL, null=True, blank=True, related_name='awarded_requests'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_open(self):
        return self.status == self.STATUS_OPEN

    def to_dict(self, items=None):
        data = {
            "id": self.id,
            "event_date": self.event_date.isoformat(),
            "event_location": self.event_location,
            "budget_min": str(self.budget_min) if self.budget_min is not None else None,
            "budget_max": str(self.budget_max) if self.budget_max is not None else None,
            "notes": self.notes,
            "status": self.status,
            "awarded_vendor_id": self.awarded_vendor_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        if items is not None:
            data["items"] = [item.to_dict() for item in items]
        return data

    def __str__(self):
        return f"{self.client} - {self.event_date} ({self.status})"


class RequestItem(models.Model):
    request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, related_name='items')
    category = models.ForeignKey(ServiceCategory, on_delete=models.PROTECT, related_name='request_items')
    created_at = models.DateTimeField(auto_now_add=True)

    def to_dict(self):
        return {
            "id": self.id,
            "category": {
                "id": self.category.id,
                "name": self.category.name,
            },
        }

    def __str__(self):
        return f"Request #{self.request_id}: {self.category.name}"
