from rest_framework import serializers

from core.models import User


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
    username = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField()

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('La contraseña es obligatoria')
        return v

    def validate(self, attrs):
        account = (attrs.get('email') or attrs.get('username') or '').strip()
        if not account:
            raise serializers.ValidationError({'email': 'El email es obligatorio'})
        attrs['account'] = account
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)


class AccessCreateSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES])
    password = serializers.CharField(min_length=6, write_only=True)


class AccessGrantSerializer(serializers.Serializer):
    password = serializers.CharField(min_length=6, write_only=True)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
