from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("leads", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="WebhookEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("event_id", models.CharField(max_length=255, unique=True)),
                ("provider", models.CharField(choices=[("META", "Meta lead ads")], max_length=16)),
                ("event_type", models.CharField(max_length=64)),
                ("payload", models.JSONField()),
                ("processed_at", models.DateTimeField()),
                ("lead", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="webhook_events", to="leads.lead")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
