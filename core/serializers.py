"""
Core App Serializers - Users & Company
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password

from .models import Company

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read operations)."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'full_name', 'phone_number', 'role',
            'is_active', 'date_joined'
        ]
        read_only_fields = ['id', 'role', 'date_joined']


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer for operator creation (admin only)."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password]
    )

    class Meta:
        model = User
        fields = ['email', 'password', 'full_name', 'phone_number', 'role']

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class CompanySerializer(serializers.ModelSerializer):
    """Serializer for the issuing company."""

    class Meta:
        model = Company
        fields = [
            'id', 'business_name', 'phone_number', 'gstin', 'email_id',
            'business_type', 'business_category', 'state', 'pincode',
            'business_address', 'logo', 'signature', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_gstin(self, value):
        value = (value or '').strip().upper()
        if value and len(value) != 15:
            raise serializers.ValidationError("GSTIN must be 15 characters")
        return value
