"""
seed_services.py
----------------
Seeds (creates or updates) a demo salon: services, staff, who does what, and
weekly working hours. Safe to run repeatedly; it upserts by name.

Usage:
    python manage.py seed_services
    python manage.py seed_services --tenant my-salon
"""

from datetime import time
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from booking.models import Service, Staff, StaffService, Tenant
from staff.models import StaffSchedule


CATALOG = [
    {"name": "Knippen dames",      "duration_minutes": 45,  "price": Decimal("42.50"), "buffer_time_after": 15},
    {"name": "Knippen heren",      "duration_minutes": 30,  "price": Decimal("27.50"), "buffer_time_after": 0},
    {"name": "Kleuren",            "duration_minutes": 90,  "price": Decimal("75.00"), "buffer_time_after": 15},
    {"name": "Föhnen",             "duration_minutes": 30,  "price": Decimal("20.00"), "buffer_time_after": 0},
    {"name": "Gezichtsbehandeling", "duration_minutes": 60, "price": Decimal("55.00"), "buffer_time_after": 10},
]

# staff name -> (weekdays worked 0=Sunday..6=Saturday, start, end, custom durations)
TEAM = {
    "Sanne": ((1, 2, 3, 4, 5), time(9, 0), time(17, 0), {"Kleuren": 75}),
    "Daan": ((2, 3, 4, 5, 6), time(10, 0), time(18, 0), {}),
}


class Command(BaseCommand):
    help = "Seed or update a demo salon with services, staff and working hours."

    def add_arguments(self, parser):
        parser.add_argument("--tenant", default="demo-salon", help="Tenant slug to seed.")

    @transaction.atomic
    def handle(self, *args, **options):
        slug = options["tenant"]
        tenant, _ = Tenant.objects.get_or_create(slug=slug, defaults={"name": slug.replace("-", " ").title()})

        created = 0
        updated = 0
        services = {}
        for item in CATALOG:
            defaults = {k: v for k, v in item.items() if k != "name"}
            svc, is_created = Service.objects.update_or_create(
                tenant=tenant, name=item["name"], defaults={**defaults, "active": True}
            )
            services[svc.name] = svc
            if is_created:
                created += 1
            else:
                updated += 1

        for first_name, (days, start, end, custom) in TEAM.items():
            member, _ = Staff.objects.get_or_create(tenant=tenant, first_name=first_name)
            for svc in services.values():
                StaffService.objects.update_or_create(
                    staff=member,
                    service=svc,
                    defaults={
                        "tenant": tenant,
                        "active": True,
                        "custom_duration_minutes": custom.get(svc.name),
                    },
                )
            StaffSchedule.objects.filter(tenant=tenant, staff=member).delete()
            StaffSchedule.objects.bulk_create([
                StaffSchedule(tenant=tenant, staff=member, day_of_week=d, start_time=start, end_time=end)
                for d in days
            ])

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete for '{tenant.slug}'. Services created={created}, updated={updated}, staff={len(TEAM)}"
        ))
