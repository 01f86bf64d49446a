"""
Django admin registrations for the availability models.

Ward rows are owned by the scraper import; the admin is meant for
inspection and for fixing the odd favorite or insight by hand.
"""

from django.contrib import admin

from .models import AIInsight, HospitalWard, ScrapingLog, UserFavorite


@admin.register(HospitalWard)
class HospitalWardAdmin(admin.ModelAdmin):
    list_display = ('ward_name', 'hospital_name', 'district', 'available_places', 'scraped_at')
    list_filter = ('district',)
    search_fields = ('ward_name', 'hospital_name')


@admin.register(UserFavorite)
class UserFavoriteAdmin(admin.ModelAdmin):
    list_display = ('user', 'ward_name', 'created_at')
    search_fields = ('ward_name', 'user__username')


@admin.register(ScrapingLog)
class ScrapingLogAdmin(admin.ModelAdmin):
    list_display = ('started_at', 'completed_at', 'status', 'records_inserted', 'records_updated')
    list_filter = ('status',)


@admin.register(AIInsight)
class AIInsightAdmin(admin.ModelAdmin):
    list_display = ('generated_at', 'expires_at')
