from rest_framework import serializers

from core.models import User
from core.services.reference import clean_text as _clean


class CenterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El nombre es obligatorio')
        return v

    def validate_address(self, v):
        return _clean(v)


class SpecialtySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=20)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El nombre es obligatorio')
        return v

    def validate_code(self, v):
        v = _clean(v).upper()
        if not v:
            raise serializers.ValidationError('El código es obligatorio')
        return v


class SpecialtyActivitiesSerializer(serializers.Serializer):
    activityIds = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=True)


class ActivitySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El nombre es obligatorio')
        return v

    def validate_description(self, v):
        return _clean(v)


class ConsultationSerializer(serializers.Serializer):
    consultationNumber = serializers.CharField(max_length=20)
    extension = serializers.CharField(required=False, allow_blank=True, max_length=20)
    specialtyId = serializers.IntegerField(required=False, allow_null=True)
    centerId = serializers.IntegerField()
    isActive = serializers.BooleanField(required=False)

    def validate_consultationNumber(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('El número de consulta es obligatorio')
        return v

    def validate_extension(self, v):
        return _clean(v)


class ConsultationQuerySerializer(serializers.Serializer):
    specialtyId = serializers.IntegerField(required=False, min_value=1)
    centerId = serializers.IntegerField(required=False, min_value=1)


class UserSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
    specialtyId = serializers.IntegerField(required=False, allow_null=True)
    consultationId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)

    def validate_fullName(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('El nombre debe tener al menos 2 caracteres')
        return v


class ActiveUsersQuerySerializer(serializers.Serializer):
    specialtyId = serializers.IntegerField(required=False, min_value=1)


class SpecialtyCountersSerializer(serializers.Serializer):
    specialtyId = serializers.IntegerField(min_value=1)
    isActive = serializers.BooleanField()
