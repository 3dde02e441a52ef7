from django.contrib import admin

from cassius_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("title", "type", "status", "date_start", "date_end", "tenant_id")
    list_filter = ("status", "type")
    search_fields = ("title",)
    ordering = ("-date_start",)
    readonly_fields = ("id", "created_at", "updated_at", "completed_at", "cancelled_at")
