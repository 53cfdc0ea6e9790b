from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DentalPractice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("city", models.CharField(blank=True, max_length=128)),
                ("status", models.CharField(choices=[("ACTIVE", "Active"), ("PAUSED", "Paused"), ("CHURNED", "Churned")], default="ACTIVE", max_length=16)),
                ("assigned_salesperson", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_practices", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="TreatmentType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("average_price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("practice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="treatment_types", to="practices.dentalpractice")),
            ],
            options={
                "ordering": ["practice_id", "name"],
                "unique_together": {("practice", "name")},
            },
        ),
        migrations.CreateModel(
            name="Campaign",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("external_id", models.CharField(max_length=128, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("spend", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("practice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="campaigns", to="practices.dentalpractice")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
