from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    """Profile of the current user, including the cached points balance."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'avatar_url',
            'role',
            'points',
            'created_at',
            'last_login',
        ]
        read_only_fields = ['id', 'email', 'role', 'points', 'created_at', 'last_login']


class UserRegistrationSerializer(serializers.Serializer):
    """Validate registration input."""

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )
    display_name = serializers.CharField(min_length=2, max_length=50, required=False, allow_blank=True)
    avatar_url = serializers.URLField(required=False, allow_null=True)

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class UserPublicSerializer(serializers.ModelSerializer):
    """Public user info (uploader, swap parties)."""

    class Meta:
        model = User
        fields = ['id', 'display_name', 'avatar_url']
        read_only_fields = fields


class AdminUserSerializer(serializers.ModelSerializer):
    """User row as shown in the admin panel."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'avatar_url',
            'role',
            'points',
            'is_active',
            'created_at',
        ]
        read_only_fields = fields


class AdminUserUpdateSerializer(serializers.Serializer):
    """Validate admin updates to a user."""

    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    is_active = serializers.BooleanField(required=False)
