import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="TeamMessage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sender_display_name", models.CharField(max_length=150, verbose_name="Sender Name")),
                ("channel_address", models.CharField(db_index=True, max_length=40, verbose_name="Channel Address")),
                ("text", models.TextField(blank=True, default="", verbose_name="Text")),
                ("attachment_type", models.CharField(blank=True, choices=[("image", "Image"), ("video", "Video"), ("file", "File")], default="", max_length=10, verbose_name="Attachment Type")),
                ("attachment_url", models.URLField(blank=True, default="", max_length=500, verbose_name="Attachment URL")),
                ("attachment_name", models.CharField(blank=True, default="", max_length=255, verbose_name="Attachment Name")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Sent At")),
                ("sender", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="team_messages", to=settings.AUTH_USER_MODEL, verbose_name="Sender")),
            ],
            options={
                "verbose_name": "Team Message",
                "verbose_name_plural": "Team Messages",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["channel_address", "created_at"], name="teammsg_channel_created_idx")],
            },
        ),
    ]
