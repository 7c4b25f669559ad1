from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..models import Activity
from ..permissions import IsAdminOrReadOnly
from ..serializers.reference import ActivitySerializer
from ..services.reference import serialize_activity


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def activities(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': [serialize_activity(a) for a in Activity.objects.all()]})

    s = ActivitySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    activity = Activity.objects.create(name=vd['name'], description=vd.get('description', ''))
    return Response({'ok': True, 'data': serialize_activity(activity)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminOrReadOnly])
def activity_detail(request, pk: int):
    activity = get_object_or_404(Activity, pk=pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': serialize_activity(activity)})
    if request.method == 'DELETE':
        activity.delete()
        return Response({'ok': True})

    s = ActivitySerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    for field, value in s.validated_data.items():
        setattr(activity, field, value)
    activity.save()
    return Response({'ok': True, 'data': serialize_activity(activity)})
