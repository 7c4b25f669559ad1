"""
Specialty views.

Besides the usual CRUD, a specialty owns the list of activities that may
be registered under it (``/api/specialties/<id>/activities``).  Every
write drops the cached specialty list used by the planning grid.
"""
from __future__ import annotations

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..models import Activity, Specialty, SpecialtyActivity
from ..permissions import IsAdminOrReadOnly
from ..serializers.reference import SpecialtyActivitiesSerializer, SpecialtySerializer
from ..services.reference import invalidate_reference_cache, serialize_activity, serialize_specialty


def _check_unique_code(code: str, exclude_pk=None):
    qs = Specialty.objects.filter(code__iexact=code)
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError({'code': 'Ya existe una especialidad con ese código.'})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def specialties(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': [serialize_specialty(s) for s in Specialty.objects.all()]})

    s = SpecialtySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    _check_unique_code(vd['code'])
    specialty = Specialty.objects.create(name=vd['name'], code=vd['code'])
    invalidate_reference_cache()
    return Response({'ok': True, 'data': serialize_specialty(specialty)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def specialty_detail(request, pk: int):
    specialty = get_object_or_404(Specialty, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_specialty(specialty)})
    if request.method == 'DELETE':
        specialty.delete()
        invalidate_reference_cache()
        return Response({'ok': True})

    s = SpecialtySerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'code' in vd:
        _check_unique_code(vd['code'], exclude_pk=specialty.pk)
        specialty.code = vd['code']
    if 'name' in vd:
        specialty.name = vd['name']
    specialty.save()
    invalidate_reference_cache()
    return Response({'ok': True, 'data': serialize_specialty(specialty)})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def specialty_activities(request, pk: int):
    """GET the activities linked to a specialty; POST replaces the set."""
    specialty = get_object_or_404(Specialty, pk=pk)
    if request.method == 'POST':
        s = SpecialtyActivitiesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        ids = list(dict.fromkeys(s.validated_data['activityIds']))
        found = set(Activity.objects.filter(id__in=ids).values_list('id', flat=True))
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError({'activityIds': f'Actividades inexistentes: {missing}'})
        with transaction.atomic():
            SpecialtyActivity.objects.filter(specialty=specialty).exclude(activity_id__in=ids).delete()
            existing = set(SpecialtyActivity.objects.filter(specialty=specialty).values_list('activity_id', flat=True))
            SpecialtyActivity.objects.bulk_create([
                SpecialtyActivity(specialty=specialty, activity_id=i) for i in ids if i not in existing
            ])

    activities = Activity.objects.filter(specialty_links__specialty=specialty).order_by('name')
    return Response({'ok': True, 'specialtyId': specialty.id,
                     'data': [serialize_activity(a) for a in activities]})
