"""
Staff management views.

Staff rows are created without login access (unusable password); access
is granted separately from ``/api/access``.  ``/api/users/active`` is the
read used by the planning screen filters and is open to every
authenticated user.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Consultation, Specialty, User
from ..permissions import IsAdminRole
from ..serializers.reference import ActiveUsersQuerySerializer, UserSerializer
from ..services.access import username_for_email
from ..services.planning import list_active_users
from ..services.reference import serialize_user


def _apply(user: User, vd: dict) -> None:
    if 'email' in vd:
        clash = User.objects.filter(email__iexact=vd['email']).exclude(pk=user.pk)
        if clash.exists():
            raise ValidationError({'email': 'Ya existe un usuario con ese email.'})
        user.email = vd['email']
    if 'fullName' in vd:
        user.full_name = vd['fullName']
    if 'role' in vd:
        user.role = vd['role']
    if 'isActive' in vd:
        user.is_active = vd['isActive']
    if 'specialtyId' in vd:
        user.specialty = None
        if vd['specialtyId'] is not None:
            user.specialty = Specialty.objects.filter(pk=vd['specialtyId']).first()
            if user.specialty is None:
                raise ValidationError({'specialtyId': 'No existe.'})
    if 'consultationId' in vd:
        user.consultation = None
        if vd['consultationId'] is not None:
            user.consultation = Consultation.objects.filter(pk=vd['consultationId']).first()
            if user.consultation is None:
                raise ValidationError({'consultationId': 'No existe.'})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def users(request):
    if request.method == 'GET':
        qs = User.objects.select_related('specialty').order_by('full_name', 'id')
        return Response({'ok': True, 'data': [serialize_user(u) for u in qs]})

    s = UserSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = User(username=username_for_email(vd['email']))
    _apply(user, vd)
    user.set_unusable_password()
    user.save()
    return Response({'ok': True, 'data': serialize_user(user)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def user_detail(request, pk: int):
    user = get_object_or_404(User, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_user(user)})
    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            raise ValidationError({'id': 'No puedes eliminar tu propio usuario.'})
        user.delete()
        return Response({'ok': True})

    s = UserSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    _apply(user, s.validated_data)
    user.save()
    return Response({'ok': True, 'data': serialize_user(user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def active_users(request):
    q = ActiveUsersQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': list_active_users(q.validated_data.get('specialtyId'))})
