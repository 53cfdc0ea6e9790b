"""Schemas for inbound provider payloads."""

from rest_framework import serializers

# ``meta:<leadId>`` has to fit WebhookEvent.event_id (255).
MAX_LEAD_ID_LENGTH = 200
# Matches Campaign.external_id.
MAX_CAMPAIGN_ID_LENGTH = 128


class FieldDataSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, trim_whitespace=False, max_length=100)
    values = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False)
    )


class MetaLeadSerializer(serializers.Serializer):
    """Meta lead-ads delivery: ids plus the submitted form fields."""

    leadId = serializers.CharField(max_length=MAX_LEAD_ID_LENGTH)
    campaignId = serializers.CharField(max_length=MAX_CAMPAIGN_ID_LENGTH)
    created_time = serializers.CharField(max_length=64)
    field_data = FieldDataSerializer(many=True)
