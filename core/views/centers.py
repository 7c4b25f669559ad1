from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..models import Center
from ..permissions import IsAdminOrReadOnly
from ..serializers.reference import CenterSerializer
from ..services.reference import serialize_center


def _check_unique(name: str, exclude_pk=None):
    qs = Center.objects.filter(name__iexact=name)
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError({'name': 'Ya existe un centro con ese nombre.'})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def centers(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': [serialize_center(c) for c in Center.objects.all()]})

    s = CenterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    _check_unique(vd['name'])
    center = Center.objects.create(name=vd['name'], address=vd.get('address', ''))
    return Response({'ok': True, 'data': serialize_center(center)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def center_detail(request, pk: int):
    center = get_object_or_404(Center, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_center(center)})
    if request.method == 'DELETE':
        center.delete()
        return Response({'ok': True})

    s = CenterSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'name' in vd:
        _check_unique(vd['name'], exclude_pk=center.pk)
        center.name = vd['name']
    if 'address' in vd:
        center.address = vd['address']
    center.save()
    return Response({'ok': True, 'data': serialize_center(center)})
