"""
Core constants — **Single Source of Truth** for the office's closed
vocabularies.

Categories and areas are fixed by the office's charter; every app that
validates, filters or aggregates by them imports the enums from here
instead of hard-coding strings.  The order of members is significant:
reporting buckets are emitted in declaration order.
"""

from django.db import models


class Category(models.TextChoices):
    """Subject area a complaint is filed under."""

    INFRASTRUCTURE = "infrastructure", "Infrastructure & Roads"
    HEALTHCARE = "healthcare", "Healthcare"
    EDUCATION = "education", "Education"
    SECURITY = "security", "Security"
    UTILITIES = "utilities", "Water & Electricity"
    LEGAL = "legal", "Legal Services"


class Area(models.TextChoices):
    """Residential area (town centre or village) inside the constituency."""

    QANATAR_CENTER = "qanatar_center", "Qanatar Center"
    VILLAGE_SHALAQAN = "village_shalaqan", "Shalaqan"
    VILLAGE_MONIRA = "village_monira", "Monira"
    VILLAGE_ABUGHAIT = "village_abughait", "Abu Ghait"
    VILLAGE_KHARQANIA = "village_kharqania", "Kharqania"
    VILLAGE_BASSOUS = "village_bassous", "Bassous"
    VILLAGE_BARADA = "village_barada", "Barada"


class ReportPeriod(models.TextChoices):
    """Look-back window accepted by the reporting aggregator."""

    DAY = "day", "Today"
    WEEK = "week", "Last 7 Days"
    MONTH = "month", "Last Month"
    YEAR = "year", "Last Year"
    ALL_TIME = "all", "All Time"


# Sentinel stored in ``User.category_scope`` for unrestricted staff.
ALL_CATEGORIES: str = "all"

# Default location for complaints filed by citizens without a profile address.
DEFAULT_PROVINCE: str = "Qalyubia"
DEFAULT_CITY: str = "Qanatar"
DEFAULT_AREA: str = Area.QANATAR_CENTER
