import logging

from django.core.management.base import BaseCommand

from catalog.models import ServiceCategory

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Catering", "Food and beverage service for events"),
    ("Photography", "Event photography and videography"),
    ("Venue", "Event spaces and halls"),
    ("Music & DJ", "Live bands, DJs and sound systems"),
    ("Decoration", "Theming, lighting and decor"),
    ("Florist", "Flower arrangements and bouquets"),
    ("Event Planning", "Coordination and day-of management"),
    ("Transportation", "Guest shuttles and vehicle hire"),
]


class Command(BaseCommand):
    help = "Create the default service categories (existing names are left untouched)"

    def handle(self, *args, **options):
        created = 0
        for name, description in DEFAULT_CATEGORIES:
            _, was_created = ServiceCategory.objects.get_or_create(
                name=name,
                defaults={"description": description},
            )
            if was_created:
                created += 1

        logger.info("Seeded %d new service categories", created)
        self.stdout.write(self.style.SUCCESS(f"{created} categories created, {len(DEFAULT_CATEGORIES) - created} already present"))
