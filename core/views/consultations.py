from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..models import Center, Consultation, Specialty
from ..permissions import IsAdminOrReadOnly
from ..serializers.reference import ConsultationQuerySerializer, ConsultationSerializer
from ..services.reference import serialize_consultation


def _apply(consultation: Consultation, vd: dict) -> None:
    if 'consultationNumber' in vd:
        consultation.consultation_number = vd['consultationNumber']
    if 'extension' in vd:
        consultation.extension = vd['extension']
    if 'isActive' in vd:
        consultation.is_active = vd['isActive']
    if 'centerId' in vd:
        center = Center.objects.filter(pk=vd['centerId']).first()
        if center is None:
            raise ValidationError({'centerId': 'No existe.'})
        consultation.center = center
    if 'specialtyId' in vd:
        specialty = None
        if vd['specialtyId'] is not None:
            specialty = Specialty.objects.filter(pk=vd['specialtyId']).first()
            if specialty is None:
                raise ValidationError({'specialtyId': 'No existe.'})
        consultation.specialty = specialty
    clash = Consultation.objects.filter(
        center_id=consultation.center_id, consultation_number=consultation.consultation_number,
    ).exclude(pk=consultation.pk)
    if clash.exists():
        raise ValidationError({'consultationNumber': 'Ya existe esa consulta en el centro.'})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def consultations(request):
    if request.method == 'GET':
        q = ConsultationQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = Consultation.objects.all()
        if q.validated_data.get('specialtyId'):
            qs = qs.filter(specialty_id=q.validated_data['specialtyId'])
        if q.validated_data.get('centerId'):
            qs = qs.filter(center_id=q.validated_data['centerId'])
        return Response({'ok': True, 'data': [serialize_consultation(c) for c in qs]})

    s = ConsultationSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    consultation = Consultation()
    _apply(consultation, s.validated_data)
    consultation.save()
    return Response({'ok': True, 'data': serialize_consultation(consultation)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def consultation_detail(request, pk: int):
    consultation = get_object_or_404(Consultation, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_consultation(consultation)})
    if request.method == 'DELETE':
        consultation.delete()
        return Response({'ok': True})

    s = ConsultationSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    _apply(consultation, s.validated_data)
    consultation.save()
    return Response({'ok': True, 'data': serialize_consultation(consultation)})
