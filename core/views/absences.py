from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..models import UserAbsence
from ..permissions import IsAdminOrReadOnly
from ..serializers.planning import AbsenceQuerySerializer, AbsenceSerializer
from ..services.notify import broadcast_planning_refresh
from ..services.planning import save_absence, serialize_absence


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def absences(request):
    if request.method == 'GET':
        q = AbsenceQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        qs = UserAbsence.objects.all()
        if vd.get('userId'):
            qs = qs.filter(user_id=vd['userId'])
        # overlap with the requested window
        if vd.get('endDate'):
            qs = qs.filter(start_date__lte=vd['endDate'])
        if vd.get('startDate'):
            qs = qs.filter(end_date__gte=vd['startDate'])
        return Response({'ok': True, 'data': [serialize_absence(a) for a in qs]})

    s = AbsenceSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    absence = save_absence(UserAbsence(), s.validated_data)
    return Response({'ok': True, 'data': serialize_absence(absence)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def absence_detail(request, pk: int):
    absence = get_object_or_404(UserAbsence, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_absence(absence)})
    if request.method == 'DELETE':
        start, end = absence.start_date, absence.end_date
        absence.delete()
        broadcast_planning_refresh(start, end)
        return Response({'ok': True})

    s = AbsenceSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    absence = save_absence(absence, s.validated_data)
    return Response({'ok': True, 'data': serialize_absence(absence)})
