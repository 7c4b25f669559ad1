from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from core.models import PlanningRecord
from core.services.date_range import VIEW_MODES
from core.services.reference import clean_text

SHIFT_CHOICES = [c[0] for c in PlanningRecord.SHIFT_CHOICES]


def _today():
    return timezone.localdate()


def _default_view():
    return settings.PLANNING_DEFAULT_VIEW


class PlanningQuerySerializer(serializers.Serializer):
    """Query string of ``GET /api/planning``.

    Feed it ``request.query_params.dict()``; with a raw ``QueryDict`` DRF
    reads a missing boolean as ``False``.
    """
    view = serializers.ChoiceField(choices=VIEW_MODES, default=_default_view)
    date = serializers.DateField(default=_today)
    specialtyId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    userId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    showAbsences = serializers.BooleanField(default=True)


class RecordsQuerySerializer(serializers.Serializer):
    startDate = serializers.DateField(default=_today)
    endDate = serializers.DateField(required=False)
    specialtyId = serializers.IntegerField(required=False, min_value=1)
    userId = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        attrs.setdefault('endDate', attrs['startDate'])
        if attrs['startDate'] > attrs['endDate']:
            raise serializers.ValidationError({'endDate': 'La fecha de fin debe ser posterior a la de inicio.'})
        return attrs


class RegisterSerializer(serializers.Serializer):
    startDate = serializers.DateField()
    endDate = serializers.DateField()
    userId = serializers.IntegerField(min_value=1)
    specialtyId = serializers.IntegerField(min_value=1)
    activityId = serializers.IntegerField(min_value=1)
    centerId = serializers.IntegerField(min_value=1)
    consultationId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    shift = serializers.ChoiceField(choices=SHIFT_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['startDate'] > attrs['endDate']:
            raise serializers.ValidationError({'endDate': 'La fecha de fin debe ser posterior a la de inicio.'})
        max_days = getattr(settings, 'PLANNING_MAX_REGISTER_DAYS', 366)
        if (attrs['endDate'] - attrs['startDate']).days + 1 > max_days:
            raise serializers.ValidationError({'endDate': f'El rango no puede superar {max_days} días.'})
        return attrs


class RecordUpdateSerializer(serializers.Serializer):
    userId = serializers.IntegerField(required=False, min_value=1)
    specialtyId = serializers.IntegerField(required=False, min_value=1)
    activityId = serializers.IntegerField(required=False, min_value=1)
    centerId = serializers.IntegerField(required=False, min_value=1)
    consultationId = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    recordDate = serializers.DateField(required=False)
    shift = serializers.ChoiceField(choices=SHIFT_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class AbsenceSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    startDate = serializers.DateField()
    endDate = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_reason(self, v):
        return clean_text(v)

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError({'endDate': 'La fecha de fin debe ser posterior a la de inicio.'})
        return attrs


class AbsenceQuerySerializer(serializers.Serializer):
    userId = serializers.IntegerField(required=False, min_value=1)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
