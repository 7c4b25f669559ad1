from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Consultation, Specialty
from ..permissions import IsAdminRole
from ..serializers.reference import SpecialtyCountersSerializer
from ..services.reference import serialize_consultation
from ..services.visit_counters import grouped_counters, set_specialty_counters, toggle_counter


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def visit_counters(request):
    return Response({'ok': True, 'data': grouped_counters()})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def visit_counter_toggle(request, pk: int):
    consultation = toggle_counter(get_object_or_404(Consultation, pk=pk))
    return Response({'ok': True, 'data': serialize_consultation(consultation)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def visit_counters_specialty(request):
    """Switch every consultation room of one specialty on or off."""
    s = SpecialtyCountersSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    specialty = get_object_or_404(Specialty, pk=s.validated_data['specialtyId'])
    updated = set_specialty_counters(specialty, s.validated_data['isActive'])
    return Response({'ok': True, 'updated': updated})
