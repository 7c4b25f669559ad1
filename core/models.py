"""
Database models for the medical planning backend.

These models capture the reference data of the planning panel (centers,
specialties, activities and consultation rooms), the staff users that
can be scheduled, and the two record types the planning grid is built
from: per-day shift assignments and absence intervals.  Field names
mirror the JSON exposed to the front-end so the views can map rows to
responses without renaming.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class Center(models.Model):
    """A medical center hosting consultation rooms."""
    name = models.CharField(max_length=255, unique=True)
    address = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Specialty(models.Model):
    """A medical discipline.

    ``code`` is the short label shown as the row header of the planning
    grid and is the grouping key used by the grid aggregator.
    """
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'specialties'

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Activity(models.Model):
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'activities'

    def __str__(self) -> str:
        return self.name


class SpecialtyActivity(models.Model):
    """Activities that may be registered for a specialty."""
    specialty = models.ForeignKey(Specialty, on_delete=models.CASCADE, related_name='activity_links')
    activity = models.ForeignKey(Activity, on_delete=models.CASCADE, related_name='specialty_links')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('specialty', 'activity')]

    def __str__(self) -> str:
        return f"{self.specialty_id} -> {self.activity_id}"


class Consultation(models.Model):
    """A consultation room inside a center.

    ``is_active`` is the visit counter switch: inactive rooms are not
    offered to patients even though planning records may still point at
    them.
    """
    consultation_number = models.CharField(max_length=20)
    extension = models.CharField(max_length=20, blank=True)
    specialty = models.ForeignKey(
        Specialty, null=True, blank=True, on_delete=models.SET_NULL, related_name='consultations'
    )
    center = models.ForeignKey(Center, on_delete=models.PROTECT, related_name='consultations')
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['consultation_number']
        unique_together = [('center', 'consultation_number')]

    def __str__(self) -> str:
        return f"Consulta {self.consultation_number} ({self.center_id})"


class User(AbstractUser):
    """Staff member, optionally with login access.

    Roles mirror the front-end roles: ``admin`` may edit reference data
    and the planning, ``readonly`` may only look at the planning.  Staff
    rows created from the users screen carry an unusable password until
    access is granted, so "has access" is simply
    :meth:`has_usable_password`.
    """
    ROLE_ADMIN = 'admin'
    ROLE_READONLY = 'readonly'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_READONLY, 'Read only'),
    ]
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_READONLY)
    specialty = models.ForeignKey(
        Specialty, null=True, blank=True, on_delete=models.SET_NULL, related_name='users', db_index=True
    )
    consultation = models.ForeignKey(
        Consultation, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.full_name or self.username} ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role == self.ROLE_ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username


class PlanningRecord(models.Model):
    """One staff member assigned to an activity for one day and shift."""
    SHIFT_MORNING = 'morning'
    SHIFT_AFTERNOON = 'afternoon'
    SHIFT_CHOICES = [
        (SHIFT_MORNING, 'Mañana'),
        (SHIFT_AFTERNOON, 'Tarde'),
    ]
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='planning_records')
    specialty = models.ForeignKey(Specialty, on_delete=models.PROTECT, related_name='planning_records')
    activity = models.ForeignKey(Activity, on_delete=models.PROTECT, related_name='planning_records')
    center = models.ForeignKey(Center, on_delete=models.PROTECT, related_name='planning_records')
    consultation = models.ForeignKey(
        Consultation, null=True, blank=True, on_delete=models.SET_NULL, related_name='planning_records'
    )
    record_date = models.DateField(db_index=True)
    shift = models.CharField(max_length=10, choices=SHIFT_CHOICES)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['record_date', 'id']
        indexes = [
            models.Index(fields=['record_date', 'specialty'], name='planning_date_specialty_idx'),
            models.Index(fields=['user', 'record_date'], name='planning_user_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} {self.record_date:%F} {self.shift}"


class UserAbsence(models.Model):
    """A closed date interval during which a staff member is unavailable."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='absences')
    start_date = models.DateField()
    end_date = models.DateField()
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_date', 'id']
        indexes = [
            models.Index(fields=['user', 'start_date', 'end_date'], name='absence_user_range_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F('end_date')),
                name='absence_start_before_end',
            ),
        ]

    def __str__(self) -> str:
        return f"Absence(u={self.user_id}, {self.start_date:%F}~{self.end_date:%F})"
