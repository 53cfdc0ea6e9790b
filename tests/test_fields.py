import pytest

from apps.leads.models import Interaction, InteractionType, Lead, LeadSource, LeadStatus

pytestmark = pytest.mark.django_db


def test_array_fields_round_trip_on_non_postgres(practice):
    lead = Lead.objects.create(
        practice=practice,
        name="Array Lead",
        email="array@example.com",
        phone="+447700900222",
        source=LeadSource.MANUAL,
        status=LeadStatus.NEW,
        interested_treatments=["Invisalign", "Veneers"],
        objections=["price"],
    )
    interaction = Interaction.objects.create(
        practice=practice,
        lead=lead,
        type=InteractionType.NOTE,
        key_topics=["pricing"],
        metadata={},
    )

    lead.refresh_from_db()
    interaction.refresh_from_db()
    assert lead.interested_treatments == ["Invisalign", "Veneers"]
    assert lead.objections == ["price"]
    assert lead.pain_points == []
    assert interaction.key_topics == ["pricing"]


def test_array_fields_saved_through_update_fields(lead):
    lead.motivations = ["wedding"]
    lead.save(update_fields=["motivations"])

    lead.refresh_from_db()
    assert lead.motivations == ["wedding"]
