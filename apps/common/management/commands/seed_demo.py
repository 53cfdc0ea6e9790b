"""Management command to load development demo users, practices and leads."""

import os
from pathlib import Path
from typing import Any, Dict, List

import yaml
from django.conf import settings
from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Account, Role
from apps.leads.models import Lead, LeadSource, LeadStatus
from apps.leads.utils import normalize_email, normalize_phone_number
from apps.practices.models import Campaign, DentalPractice, TreatmentType


class Command(BaseCommand):
    help = "Import demo accounts, practices and leads. Safe to rerun."

    def add_arguments(self, parser):
        parser.add_argument(
            "--file",
            default="seeds/demo.yaml",
            help="Path to the demo seed YAML file.",
        )

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Seeding is blocked when DEBUG is off.")
        if not getattr(settings, "ALLOW_SEEDING", False):
            raise CommandError("Seeding is blocked; set ALLOW_SEEDING=true to enable it.")

        path = Path(options["file"])
        if not path.exists():
            raise CommandError(f"Seed file not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh) or {}

        with transaction.atomic():
            users = self._seed_users(payload.get("users", []))
            for practice_payload in payload.get("practices", []):
                self._seed_practice(practice_payload, users)

        self.stdout.write(self.style.SUCCESS("Demo data imported successfully."))
        for email in users:
            self.stdout.write(f"- {email}")

    # --------------------------------------------------------------------- utils
    def _seed_users(self, user_payloads: List[Dict[str, Any]]) -> Dict[str, User]:
        users: Dict[str, User] = {}
        for payload in user_payloads:
            password = os.environ.get(payload["password_env"], "").strip()
            if not password:
                raise CommandError(f"{payload['password_env']} must be set to a non-empty value.")
            role = payload["role"]
            if role not in Role.values:
                raise CommandError(f"Unknown role: {role}")

            email = normalize_email(payload["email"])
            user, _ = User.objects.get_or_create(username=email, defaults={"email": email})
            user.set_password(password)
            user.save(update_fields=["password"])
            Account.objects.update_or_create(
                user=user,
                defaults={"role": role, "full_name": payload.get("full_name", "")},
            )
            users[email] = user
        return users

    def _seed_practice(self, payload: Dict[str, Any], users: Dict[str, User]) -> None:
        salesperson = users.get(payload.get("salesperson", ""))
        practice, _ = DentalPractice.objects.update_or_create(
            name=payload["name"],
            defaults={
                "city": payload.get("city", ""),
                "email": payload.get("email", ""),
                "phone": payload.get("phone", ""),
                "assigned_salesperson": salesperson,
            },
        )

        for treatment in payload.get("treatments", []):
            TreatmentType.objects.update_or_create(
                practice=practice,
                name=treatment["name"],
                defaults={"average_price": treatment.get("average_price", 0)},
            )

        for campaign in payload.get("campaigns", []):
            Campaign.objects.update_or_create(
                external_id=campaign["external_id"],
                defaults={
                    "practice": practice,
                    "name": campaign.get("name", campaign["external_id"]),
                    "spend": campaign.get("spend", 0),
                },
            )

        for lead in payload.get("leads", []):
            email = normalize_email(lead["email"])
            if Lead.objects.filter(practice=practice, email=email).exists():
                continue
            consent = bool(lead.get("recording_consent", False))
            Lead.objects.create(
                practice=practice,
                assigned_salesperson=salesperson,
                name=lead["name"],
                email=email,
                phone=normalize_phone_number(lead["phone"]),
                source=lead.get("source", LeadSource.MANUAL),
                status=lead.get("status", LeadStatus.NEW),
                urgency=lead.get("urgency", "medium"),
                interested_treatments=lead.get("interested_treatments", []),
                pain_points=lead.get("pain_points", []),
                motivations=lead.get("motivations", []),
                objections=lead.get("objections", []),
                recording_consent=consent,
                recording_consent_at=timezone.now() if consent else None,
            )
