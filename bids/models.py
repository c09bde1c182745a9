from django.db import models
from accounts.models import Profile
from catalog.models import Service
from service_requests.models import ServiceRequest


class Bid(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_AWARDED = 'awarded'
    STATUS_REJECTED = 'rejected'
    STATUS_WITHDRAWN = 'withdrawn'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_AWARDED, 'Awarded'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_WITHDRAWN, 'Withdrawn'),
    ]

    # Which request
    request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, related_name='bids')

    # From which vendor, offering which of their services
    vendor = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='bids')
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name='bids')

    # Bid details
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_days = models.PositiveIntegerField(null=True, blank=True)
    message = models.TextField()

    # awarded_at is set iff status == awarded
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    awarded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def to_dict(self, with_vendor=False, with_service=False):
        data = {
            "id": self.id,
            "request_id": self.request_id,
            "vendor_id": self.vendor_id,
            "service_id": self.service_id,
            "amount": str(self.amount),
            "delivery_days": self.delivery_days,
            "message": self.message,
            "status": self.status,
            "awarded_at": self.awarded_at.isoformat() if self.awarded_at else None,
            "created_at": self.created_at.isoformat(),
        }
        if with_vendor:
            data["vendor"] = {
                "id": self.vendor.id,
                "full_name": self.vendor.full_name,
                "email": self.vendor.email,
                "phone": self.vendor.phone,
            }
        if with_service:
            data["service"] = {
                "id": self.service.id,
                "title": self.service.title,
                "category": self.service.category.name,
            }
        return data

    def __str__(self):
        return f"Bid #{self.id} - {self.vendor.full_name} - {self.amount}"
