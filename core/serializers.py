from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from .models import ActivityLog, Company, Profile, Property, Unit

User = get_user_model()


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ["id", "name", "email", "phone", "address", "created_at"]
        read_only_fields = ["id", "created_at"]


class PropertySerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source="company.name", read_only=True)

    class Meta:
        model = Property
        fields = ["id", "company", "company_name", "name", "address", "description", "created_at"]
        read_only_fields = ["id", "created_at"]


class UnitSerializer(serializers.ModelSerializer):
    property_name = serializers.CharField(source="property.name", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Unit
        fields = ["id", "property", "property_name", "unit_number", "rent_price", "status", "status_display", "type"]
        read_only_fields = ["id"]


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ["company", "full_name", "phone", "role"]


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "is_active", "is_staff", "date_joined"]


class UserWithProfileSerializer(UserSerializer):
    profile = ProfileSerializer(read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["profile"]


class AdminUserWriteSerializer(serializers.ModelSerializer):
    """Creates or updates a user together with its profile (role and company)."""
    full_name = serializers.CharField(write_only=True, required=False, allow_blank=True)
    phone = serializers.CharField(write_only=True, required=False, allow_blank=True)
    role = serializers.ChoiceField(write_only=True, choices=Profile.ROLE_CHOICES, required=False)
    company = serializers.PrimaryKeyRelatedField(write_only=True, queryset=Company.objects.all(), required=False, allow_null=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, min_length=6)

    class Meta:
        model = User
        fields = ["id", "username", "email", "password", "full_name", "phone", "role", "company", "is_active"]

    @transaction.atomic
    def create(self, validated_data):
        profile_data = {
            "full_name": validated_data.pop("full_name", ""),
            "phone": validated_data.pop("phone", ""),
            "role": validated_data.pop("role", "TENANT"),
            "company": validated_data.pop("company", None),
        }
        password = validated_data.pop("password", None)
        user_instance = User.objects.create_user(**validated_data, password=password)
        Profile.objects.create(user=user_instance, **profile_data)
        return user_instance

    @transaction.atomic
    def update(self, instance, validated_data):
        instance.username = validated_data.get("username", instance.username)
        instance.email = validated_data.get("email", instance.email)
        instance.is_active = validated_data.get("is_active", instance.is_active)
        password = validated_data.get("password")
        if password:
            instance.set_password(password)
        instance.save()

        profile, _ = Profile.objects.get_or_create(user=instance)
        for field in ("full_name", "phone", "role", "company"):
            if field in validated_data:
                setattr(profile, field, validated_data[field])
        profile.save()
        return instance


class ActivityLogSerializer(serializers.ModelSerializer):
    user_username = serializers.CharField(source="user.username", read_only=True, allow_null=True)

    class Meta:
        model = ActivityLog
        fields = ["id", "user", "user_username", "action", "timestamp", "details"]
        read_only_fields = fields
