from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    has_device = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'username',
            'profile_image',
            'has_device',
            'created_at',
        ]
        read_only_fields = fields

    def get_has_device(self, obj):
        return obj.has_device()


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal user info for nested serialization."""

    class Meta:
        model = User
        fields = ['id', 'username', 'profile_image']
        read_only_fields = fields


class DeviceTokenSerializer(serializers.Serializer):
    """Register (or clear, with an empty string) the push token of the device."""

    notification_token = serializers.CharField(max_length=255, allow_blank=True)


class UserRegistrationSerializer(serializers.Serializer):
    """Serializer for user registration."""

    email = serializers.EmailField(max_length=255)
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class ProfileUpdateSerializer(serializers.Serializer):
    """Change the username and/or login email."""

    username = serializers.CharField(max_length=150, required=False)
    email = serializers.EmailField(max_length=255, required=False)
