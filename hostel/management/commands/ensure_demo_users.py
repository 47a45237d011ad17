# hostel/management/commands/ensure_demo_users.py
import datetime
import os

from django.core.management.base import BaseCommand
from django.db import transaction

from hostel.models import Block, Hostel, Room, Staff, Student, User

DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "Demo@Hostel2024")

DEMO_USERS = [
    ("admin@hostel.test", "Demo Admin", User.ROLE_ADMIN),
    ("student@hostel.test", "Demo Student", User.ROLE_STUDENT),
    ("staff@hostel.test", "Demo Staff", User.ROLE_STAFF),
]


class Command(BaseCommand):
    help = "Ensure a demo hostel and one admin, student and staff account exist (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        hostel, _ = Hostel.objects.get_or_create(code="MAIN", defaults={"name": "Main Hostel"})
        block, _ = Block.objects.get_or_create(block_name="Block A", hostel=hostel)
        room, _ = Room.objects.get_or_create(
            room_name="A-101", defaults={"block": block, "capacity": 2, "room_type": "double"}
        )

        for email, name, role in DEMO_USERS:
            user, created = User.objects.get_or_create(
                email=email,
                defaults={"username": email, "name": name, "role": role, "is_active": True},
            )
            # repair role, activation and password on existing accounts
            user.username = email
            user.role = role
            user.is_active = True
            user.is_staff = role == User.ROLE_ADMIN
            user.set_password(DEMO_PASSWORD)
            user.save()

            if role == User.ROLE_STUDENT:
                Student.objects.update_or_create(
                    student_id="STU-0001",
                    defaults={
                        "user": user, "student_name": name, "email": email, "room": room,
                        "contact_number": "9800000001", "date_of_birth": datetime.date(2004, 1, 1),
                    },
                )
            elif role == User.ROLE_STAFF:
                Staff.objects.update_or_create(
                    staff_id="STF-0001",
                    defaults={
                        "user": user, "staff_name": name, "email": email, "hostel": hostel,
                        "contact_number": "9800000002", "date_of_birth": datetime.date(1990, 1, 1),
                        "position": "Warden",
                    },
                )
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role}){' created' if created else ''}"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
