"""
Confiscations app models.

A confiscation records a seizure of drugs from a citizen.  Quantities are
always stored in grams; the unit an officer typed is converted on entry.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class QuantityUnit(models.TextChoices):
    GRAMS = "g", "Grams"
    KILOGRAMS = "kg", "Kilograms"
    OUNCES = "oz", "Ounces"
    POUNDS = "lbs", "Pounds"


# Multiplier from each unit to grams.
GRAMS_PER_UNIT = {
    QuantityUnit.GRAMS: 1.0,
    QuantityUnit.KILOGRAMS: 1000.0,
    QuantityUnit.OUNCES: 28.3495,
    QuantityUnit.POUNDS: 453.592,
}


def to_grams(quantity: float, unit: str) -> float:
    return quantity * GRAMS_PER_UNIT[unit]


class Confiscation(TimeStampedModel):
    citizen_name = models.CharField(max_length=255, blank=True, default="", verbose_name="Citizen Name")
    drug_type = models.CharField(max_length=100, verbose_name="Drug Type", db_index=True)
    quantity = models.FloatField(verbose_name="Quantity (g)")
    notes = models.TextField(blank=True, default="", verbose_name="Notes")
    officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="confiscations",
        verbose_name="Logging Officer",
    )
    report = models.ForeignKey(
        "reports.Report",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="confiscations",
        verbose_name="Report",
    )

    class Meta:
        verbose_name = "Confiscation"
        verbose_name_plural = "Confiscations"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.drug_type} ({self.quantity:g} g) — {self.citizen_name or 'unknown'}"
