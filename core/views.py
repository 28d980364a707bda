# core/views.py

from django.contrib.auth import get_user_model
from rest_framework import permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import ActivityLog, Company, Profile, Property, Unit
from .permissions import IsAdmin, IsManagerOrAdmin
from .serializers import (
    ActivityLogSerializer, AdminUserWriteSerializer, CompanySerializer,
    ProfileSerializer, PropertySerializer, UnitSerializer, UserWithProfileSerializer,
)

User = get_user_model()


class MeViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]
    def list(self, request):
        serializer = UserWithProfileSerializer(request.user)
        return Response(serializer.data)
    @action(detail=False, methods=["patch"])
    def update_profile(self, request):
        prof, _ = Profile.objects.get_or_create(user=request.user)
        ser = ProfileSerializer(prof, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        # Role and company are assigned by administrators only.
        ser.save(role=prof.role, company=prof.company)
        return Response(ser.data)


class UserViewSet(viewsets.ModelViewSet):
    queryset = User.objects.select_related("profile").all().order_by("id")
    permission_classes = [IsAdmin]
    search_fields = ["username", "email", "profile__full_name"]
    def get_serializer_class(self):
        return AdminUserWriteSerializer if self.action in ("create", "update", "partial_update") else UserWithProfileSerializer
    @action(detail=False, methods=["get"])
    def tenants(self, request):
        tenants = self.get_queryset().filter(profile__role="TENANT").order_by("username")
        serializer = UserWithProfileSerializer(tenants, many=True)
        return Response(serializer.data)


class CompanyViewSet(viewsets.ModelViewSet):
    queryset = Company.objects.all().order_by("name")
    serializer_class = CompanySerializer
    permission_classes = [IsAdmin]
    search_fields = ["name", "email"]


class PropertyViewSet(viewsets.ModelViewSet):
    queryset = Property.objects.select_related("company").all().order_by("name")
    serializer_class = PropertySerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ["company"]
    search_fields = ["name", "address"]


class UnitViewSet(viewsets.ModelViewSet):
    queryset = Unit.objects.select_related("property").all().order_by("id")
    serializer_class = UnitSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ["property", "status"]
    search_fields = ["unit_number", "property__name"]


class ActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = ActivityLog.objects.select_related("user").all()
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAdmin]
    filterset_fields = ["action", "user"]
