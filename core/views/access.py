from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from ..models import User
from ..permissions import IsAdminRole
from ..serializers.auth import AccessCreateSerializer, AccessGrantSerializer
from ..services.access import create_access, grant_access, revoke_access, users_with_access
from ..services.reference import serialize_user


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def access_list(request):
    """Users that can log in; POST creates a new person with a login."""
    if request.method == 'GET':
        return Response({'ok': True, 'data': [serialize_user(u) for u in users_with_access()]})

    s = AccessCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user = create_access(full_name=vd['fullName'], email=vd['email'], role=vd['role'], password=vd['password'])
    return Response({'ok': True, 'data': serialize_user(user)}, status=status.HTTP_201_CREATED)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAdminRole])
def access_detail(request, pk: int):
    """POST grants (or resets) a login for a staff row; DELETE revokes it."""
    user = get_object_or_404(User, pk=pk)
    if request.method == 'DELETE':
        if user.pk == request.user.pk:
            raise ValidationError({'id': 'No puedes revocar tu propio acceso.'})
        revoke_access(user)
        return Response({'ok': True, 'data': serialize_user(user)})

    s = AccessGrantSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = grant_access(user, password=s.validated_data['password'], role=s.validated_data.get('role'))
    return Response({'ok': True, 'data': serialize_user(user)})
