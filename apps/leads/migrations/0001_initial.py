from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import apps.common.fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("practices", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(max_length=32)),
                ("source", models.CharField(choices=[("MANUAL", "Manual entry"), ("FACEBOOK_AD", "Facebook ad"), ("INSTAGRAM_AD", "Instagram ad"), ("GOOGLE_AD", "Google ad"), ("REFERRAL", "Referral"), ("ORGANIC", "Organic"), ("WEBSITE", "Website"), ("WALK_IN", "Walk-in"), ("OTHER", "Other")], max_length=20)),
                ("status", models.CharField(choices=[("ENQUIRY", "Enquiry"), ("NEW", "New"), ("CONTACTED", "Contacted"), ("QUALIFIED", "Qualified"), ("NURTURING", "Nurturing"), ("APPOINTMENT_BOOKED", "Appointment booked"), ("CONSULTATION_COMPLETED", "Consultation completed"), ("TREATMENT_STARTED", "Treatment started"), ("LOST", "Lost"), ("UNQUALIFIED", "Unqualified")], db_index=True, default="NEW", max_length=32)),
                ("urgency", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")], default="medium", max_length=8)),
                ("interested_treatments", apps.common.fields.CompatArrayField(base_field=models.CharField(max_length=100), blank=True, default=list, size=None)),
                ("pain_points", apps.common.fields.CompatArrayField(base_field=models.CharField(max_length=255), blank=True, default=list, size=None)),
                ("motivations", apps.common.fields.CompatArrayField(base_field=models.CharField(max_length=255), blank=True, default=list, size=None)),
                ("objections", apps.common.fields.CompatArrayField(base_field=models.CharField(max_length=255), blank=True, default=list, size=None)),
                ("estimated_budget", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("promoted_to_lead_at", models.DateTimeField(blank=True, null=True)),
                ("first_contact_at", models.DateTimeField(blank=True, null=True)),
                ("speed_to_first_contact_ms", models.BigIntegerField(blank=True, null=True)),
                ("qualified_at", models.DateTimeField(blank=True, null=True)),
                ("appointment_booked_at", models.DateTimeField(blank=True, null=True)),
                ("lost_at", models.DateTimeField(blank=True, null=True)),
                ("lost_reason", models.CharField(blank=True, choices=[("PRICE", "Price"), ("TIMING", "Timing"), ("COMPETITOR", "Went elsewhere"), ("NO_RESPONSE", "No response"), ("NOT_SUITABLE", "Not suitable"), ("OTHER", "Other")], max_length=20)),
                ("recording_consent", models.BooleanField(default=False)),
                ("recording_consent_at", models.DateTimeField(blank=True, null=True)),
                ("conversation_summary", models.TextField(blank=True)),
                ("assigned_salesperson", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_leads", to=settings.AUTH_USER_MODEL)),
                ("campaign", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="leads", to="practices.campaign")),
                ("practice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="leads", to="practices.dentalpractice")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Interaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("type", models.CharField(choices=[("CALL_OUTBOUND", "Outbound call"), ("CALL_INBOUND", "Inbound call"), ("EMAIL_SENT", "Email sent"), ("EMAIL_RECEIVED", "Email received"), ("SMS_SENT", "SMS sent"), ("SMS_RECEIVED", "SMS received"), ("NOTE", "Note"), ("STATUS_CHANGE", "Status change"), ("APPOINTMENT_CREATED", "Appointment created")], max_length=24)),
                ("subject", models.CharField(blank=True, max_length=255)),
                ("body", models.TextField(blank=True)),
                ("call_duration_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("call_recording_url", models.URLField(blank=True, max_length=500, null=True)),
                ("call_transcript", models.TextField(blank=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("ai_summary", models.TextField(blank=True)),
                ("sentiment_score", models.FloatField(blank=True, null=True)),
                ("key_topics", apps.common.fields.CompatArrayField(base_field=models.CharField(max_length=100), blank=True, default=list, size=None)),
                ("next_best_action", models.CharField(blank=True, max_length=255)),
                ("enrichment_status", models.CharField(choices=[("pending", "Pending"), ("done", "Done"), ("failed", "Failed")], default="pending", max_length=8)),
                ("enrichment_attempts", models.PositiveIntegerField(default=0)),
                ("enrichment_error", models.TextField(blank=True)),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="interactions", to=settings.AUTH_USER_MODEL)),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="interactions", to="leads.lead")),
                ("practice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="interactions", to="practices.dentalpractice")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
