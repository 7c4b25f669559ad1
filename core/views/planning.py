"""
Planning views.

``GET /api/planning`` runs one render pass and returns the grid for the
requested view.  The remaining endpoints manage the individual records
the grid is built from.
"""
from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import PlanningRecord
from ..permissions import IsAdminOrReadOnly, IsAdminRole
from ..serializers.planning import (
    PlanningQuerySerializer,
    RecordsQuerySerializer,
    RecordUpdateSerializer,
    RegisterSerializer,
)
from ..services.planning import (
    PlanningFilters,
    delete_record,
    register_records,
    render_planning,
    serialize_record,
    update_record,
)

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning(request):
    """Planning grid.

    Query params:
      - view: daily|weekly|monthly|yearly
      - date: anchor date (ISO), default today
      - specialtyId, userId: optional filters
      - showAbsences: default true
    """
    q = PlanningQuerySerializer(data=request.query_params.dict())
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    filters = PlanningFilters(
        view_mode=vd['view'],
        anchor=vd['date'],
        specialty_id=vd.get('specialtyId'),
        user_id=vd.get('userId'),
        show_absences=vd['showAbsences'],
    )
    return Response(render_planning(filters))


@api_view(['POST'])
@permission_classes([IsAdminRole])
def planning_register(request):
    """Create one record per day of ``[startDate, endDate]``."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    records = register_records(
        start_date=vd['startDate'],
        end_date=vd['endDate'],
        user_id=vd['userId'],
        specialty_id=vd['specialtyId'],
        activity_id=vd['activityId'],
        center_id=vd['centerId'],
        consultation_id=vd.get('consultationId'),
        shift=vd['shift'],
        notes=vd.get('notes', ''),
    )
    return Response({'ok': True, 'created': len(records)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def planning_records(request):
    q = RecordsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = PlanningRecord.objects.filter(record_date__gte=vd['startDate'], record_date__lte=vd['endDate'])
    if vd.get('specialtyId'):
        qs = qs.filter(specialty_id=vd['specialtyId'])
    if vd.get('userId'):
        qs = qs.filter(user_id=vd['userId'])
    return Response({'ok': True, 'data': [serialize_record(r) for r in qs.order_by('record_date', 'id')]})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def planning_record_detail(request, pk: int):
    record = get_object_or_404(PlanningRecord, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_record(record)})
    if request.method == 'DELETE':
        delete_record(record)
        return Response({'ok': True})

    s = RecordUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    record = update_record(record, s.validated_data)
    return Response({'ok': True, 'data': serialize_record(record)})
