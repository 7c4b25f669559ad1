"""
Django admin registrations for the core models.

Superusers can inspect and correct reference data, staff rows and
planning records from ``/admin/``.  The front-end remains the primary
editing surface.
"""

from django.contrib import admin

from .models import (
    Activity,
    Center,
    Consultation,
    PlanningRecord,
    Specialty,
    SpecialtyActivity,
    User,
    UserAbsence,
)


@admin.register(Center)
class CenterAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'address', 'created_at')
    search_fields = ('name', 'address')


class SpecialtyActivityInline(admin.TabularInline):
    model = SpecialtyActivity
    extra = 0


@admin.register(Specialty)
class SpecialtyAdmin(admin.ModelAdmin):
    list_display = ('id', 'code', 'name')
    search_fields = ('code', 'name')
    inlines = [SpecialtyActivityInline]


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('name',)


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('id', 'consultation_number', 'extension', 'center', 'specialty', 'is_active')
    list_filter = ('is_active', 'center', 'specialty')
    search_fields = ('consultation_number', 'extension')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'full_name', 'role', 'specialty', 'is_active')
    list_filter = ('role', 'specialty', 'is_active')
    search_fields = ('username', 'email', 'full_name')


@admin.register(PlanningRecord)
class PlanningRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'record_date', 'shift', 'user', 'specialty', 'activity', 'center')
    list_filter = ('shift', 'specialty', 'center')
    search_fields = ('user__full_name', 'user__username', 'notes')
    date_hierarchy = 'record_date'


@admin.register(UserAbsence)
class UserAbsenceAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'start_date', 'end_date', 'reason')
    search_fields = ('user__full_name', 'reason')
