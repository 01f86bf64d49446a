"""
Database models for the bed availability service.

Ward rows are written by the scraper and replaced wholesale on every
scrape cycle; nothing in the API mutates them.  Favorites are the only
records written through the API.  A favorite refers to a ward by name
only, so it survives (until cleanup) even when the ward disappears from
the source data.
"""
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from .services.parsing import parse_available_places


class HospitalWard(models.Model):
    """One scraped observation of a ward in a particular hospital."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ward_name = models.CharField(max_length=255, db_index=True)
    ward_link = models.TextField(blank=True, null=True)
    district = models.CharField(max_length=255, blank=True, null=True, db_index=True)
    hospital_name = models.CharField(max_length=500)
    # Raw text from the source page, see services.parsing
    available_places = models.CharField(max_length=50, blank=True, null=True)
    # Free text copied from the source page.  Display only, never sort on it.
    last_updated = models.CharField(max_length=100, blank=True, null=True)
    # Set by the scraper; the only trustworthy timestamp for freshness.
    scraped_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['ward_name', 'hospital_name'], name='uniq_ward_hospital'),
        ]

    def __str__(self) -> str:
        return f"{self.ward_name} @ {self.hospital_name}"

    @property
    def parsed_places(self) -> int:
        return parse_available_places(self.available_places)


class UserFavorite(models.Model):
    """A ward bookmarked by a user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='favorites')
    ward_name = models.CharField(max_length=255, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'ward_name'], name='uniq_user_favorite_ward'),
        ]
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.user_id}: {self.ward_name}"


class ScrapingLog(models.Model):
    """Audit record of one scraper run."""

    STATUS_SUCCESS = 'success'
    STATUS_FAILURE = 'failure'
    STATUS_CHOICES = [
        (STATUS_SUCCESS, 'Success'),
        (STATUS_FAILURE, 'Failure'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    started_at = models.DateTimeField()
    # NULL while running or when the run crashed
    completed_at = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, db_index=True)
    records_inserted = models.PositiveIntegerField(default=0)
    records_updated = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(completed_at__isnull=True) | Q(completed_at__gte=F('started_at')),
                name='scraping_log_completed_after_started',
            ),
        ]
        ordering = ['-started_at']

    def __str__(self) -> str:
        return f"{self.status} @ {self.started_at:%Y-%m-%d %H:%M}"


class AIInsight(models.Model):
    """Generated advisory text shown above the ward list until it expires."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    insight_text = models.TextField()
    generated_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-generated_at']

    def __str__(self) -> str:
        return self.insight_text[:50]
