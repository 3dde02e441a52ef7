from django.contrib import admin

from cassius_core.calendars.models import AppointmentExternalLink, CalendarIntegration


@admin.register(CalendarIntegration)
class CalendarIntegrationAdmin(admin.ModelAdmin):
    list_display = ("provider", "target_calendar_id", "tenant_id", "is_enabled", "last_sync_at", "sync_error_count")
    list_filter = ("provider", "is_enabled")
    readonly_fields = ("last_sync_at", "sync_error_count", "last_sync_error", "sync_token")
    exclude = ("access_token",)


@admin.register(AppointmentExternalLink)
class AppointmentExternalLinkAdmin(admin.ModelAdmin):
    list_display = ("appointment", "external_event_id", "sync_status", "last_synced_at")
    list_filter = ("sync_status", "provider")
    search_fields = ("external_event_id",)
