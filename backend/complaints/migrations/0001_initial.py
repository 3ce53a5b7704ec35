import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("pending", "Pending"),
    ("in_progress", "In Progress"),
    ("resolved", "Resolved"),
    ("rejected", "Rejected"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                ("category", models.CharField(choices=[("infrastructure", "Infrastructure & Roads"), ("healthcare", "Healthcare"), ("education", "Education"), ("security", "Security"), ("utilities", "Water & Electricity"), ("legal", "Legal Services")], db_index=True, max_length=30, verbose_name="Category")),
                ("description", models.TextField(verbose_name="Description")),
                ("status", models.CharField(choices=STATUS_CHOICES, db_index=True, default="pending", max_length=20, verbose_name="Status")),
                ("province", models.CharField(blank=True, default="", max_length=100)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("area", models.CharField(choices=[("qanatar_center", "Qanatar Center"), ("village_shalaqan", "Shalaqan"), ("village_monira", "Monira"), ("village_abughait", "Abu Ghait"), ("village_kharqania", "Kharqania"), ("village_bassous", "Bassous"), ("village_barada", "Barada")], db_index=True, max_length=50, verbose_name="Area")),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("ai_summary", models.TextField(blank=True, default="", verbose_name="Automatic Summary")),
                ("resolved_at", models.DateTimeField(blank=True, null=True, verbose_name="Resolved At")),
                ("submitter", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="complaints", to=settings.AUTH_USER_MODEL, verbose_name="Submitted By")),
            ],
            options={
                "verbose_name": "Complaint",
                "verbose_name_plural": "Complaints",
                "ordering": ["-created_at", "id"],
                "indexes": [models.Index(fields=["category", "created_at"], name="complaint_category_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="ComplaintMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sender_display_name", models.CharField(max_length=150, verbose_name="Sender Name")),
                ("text", models.TextField(verbose_name="Text")),
                ("origin", models.CharField(choices=[("human", "Human"), ("ai_assisted", "AI Assisted")], default="human", max_length=20, verbose_name="Origin")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Sent At")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="messages", to="complaints.complaint", verbose_name="Complaint")),
                ("sender", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="complaint_messages", to=settings.AUTH_USER_MODEL, verbose_name="Sender")),
            ],
            options={
                "verbose_name": "Complaint Message",
                "verbose_name_plural": "Complaint Messages",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ComplaintStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, default="", max_length=20, verbose_name="Previous Status")),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=20, verbose_name="New Status")),
                ("changed_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="complaint_status_changes", to=settings.AUTH_USER_MODEL, verbose_name="Changed By")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_logs", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Status Log",
                "verbose_name_plural": "Complaint Status Logs",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
