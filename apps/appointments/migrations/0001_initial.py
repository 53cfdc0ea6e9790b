from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("leads", "0001_initial"),
        ("practices", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Appointment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date_time", models.DateTimeField(db_index=True)),
                ("type", models.CharField(choices=[("CONSULTATION", "Consultation"), ("TREATMENT", "Treatment"), ("FOLLOW_UP", "Follow-up")], default="CONSULTATION", max_length=16)),
                ("status", models.CharField(choices=[("SCHEDULED", "Scheduled"), ("ATTENDED", "Attended"), ("NO_SHOW", "No show"), ("CANCELLED", "Cancelled")], default="SCHEDULED", max_length=16)),
                ("deposit_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("preparation_notes", models.TextField(blank=True)),
                ("showed_up", models.BooleanField(blank=True, null=True)),
                ("no_show_reason", models.CharField(blank=True, max_length=255)),
                ("consultation_notes", models.TextField(blank=True)),
                ("converted_to_treatment", models.BooleanField(default=False)),
                ("estimated_treatment_value", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("outcome_recorded_at", models.DateTimeField(blank=True, null=True)),
                ("confirmation_source", models.CharField(blank=True, choices=[("MANUAL_SALESPERSON", "Salesperson"), ("MANUAL_PRACTICE", "Practice"), ("PATIENT_PORTAL", "Patient portal")], max_length=24)),
                ("booked_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="booked_appointments", to=settings.AUTH_USER_MODEL)),
                ("confirmed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="confirmed_appointments", to=settings.AUTH_USER_MODEL)),
                ("lead", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="leads.lead")),
                ("practice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="appointments", to="practices.dentalpractice")),
                ("treatment_type", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="appointments", to="practices.treatmenttype")),
            ],
            options={
                "ordering": ["date_time"],
            },
        ),
    ]
