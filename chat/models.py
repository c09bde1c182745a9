from django.db import models
from accounts.models import Profile
from service_requests.models import ServiceRequest


class Conversation(models.Model):
    """
    Thread between the client of a request and one bidding vendor.
    Opened when the vendor bids; there is no messaging endpoint yet.
    """

    request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, related_name='conversations')
    client = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='client_conversations')
    vendor = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='vendor_conversations')
    last_message_at = models.DateTimeField(auto_now_add=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['request', 'client', 'vendor'],
                name='unique_conversation_per_request_pair',
            ),
        ]

    def __str__(self):
        return f"Conversation #{self.id} - Request #{self.request_id}"


class Message(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(Profile, on_delete=models.SET_NULL, null=True, related_name='sent_messages')
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Message by {self.sender} at {self.created_at}"
