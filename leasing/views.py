# leasing/views.py

from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.models import Unit
from core.permissions import IsAdmin, IsManagerOrAdmin
from .filters import DocumentFilter, LeaseFilter, PaymentFilter
from .models import Document, Lease, Payment
from .serializers import (
    CancelPaymentSerializer, DocumentSerializer, LeaseSerializer, PaymentSerializer,
    RecordPaymentSerializer, RenewLeaseSerializer, TerminateLeaseSerializer,
)
from .services import leases as lease_services
from .services import payments as payment_services


def _is_tenant(user):
    if user.is_staff or user.is_superuser:
        return False
    return getattr(getattr(user, "profile", None), "role", "TENANT") == "TENANT"


class LeaseViewSet(viewsets.ModelViewSet):
    queryset = (
        Lease.objects.select_related("company", "unit", "unit__property", "tenant")
        .annotate(payments_count=Count("payments", filter=Q(payments__deleted_at__isnull=True)))
        .all()
    )
    serializer_class = LeaseSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_class = LeaseFilter
    search_fields = ["unit__unit_number", "unit__property__name", "tenant__username", "tenant__email"]
    ordering_fields = ["start_date", "end_date", "rent_amount", "created_at", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        qs = super().get_queryset()
        if _is_tenant(self.request.user):
            qs = qs.filter(tenant=self.request.user)
        return qs

    def _refreshed(self, lease_id):
        return self.get_serializer(self.get_queryset().get(pk=lease_id)).data

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        lease = self.get_object()
        lease_services.activate_lease(lease.pk, user=request.user)
        return Response(self._refreshed(lease.pk))

    @action(detail=True, methods=["post"])
    def terminate(self, request, pk=None):
        lease = self.get_object()
        ser = TerminateLeaseSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        lease_services.terminate_lease(
            lease.pk, ser.validated_data["reason"], date=ser.validated_data.get("date"), user=request.user
        )
        return Response(self._refreshed(lease.pk))

    @action(detail=True, methods=["post"])
    def renew(self, request, pk=None):
        lease = self.get_object()
        ser = RenewLeaseSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        renewed = lease_services.renew_lease(
            lease.pk,
            ser.validated_data["end_date"],
            new_rent_amount=ser.validated_data.get("rent_amount"),
            user=request.user,
        )
        return Response(self._refreshed(renewed.pk), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="generate-payments")
    def generate_payments(self, request, pk=None):
        lease = self.get_object()
        result = lease_services.generate_payment_schedule(lease.pk, user=request.user)
        return Response(result)

    @action(detail=True, methods=["get"])
    def payments(self, request, pk=None):
        lease = self.get_object()
        ser = PaymentSerializer(lease.payments.select_related("recorded_by"), many=True)
        return Response(ser.data)


class PaymentViewSet(viewsets.ModelViewSet):
    queryset = Payment.objects.select_related("lease", "recorded_by").all()
    serializer_class = PaymentSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_class = PaymentFilter
    search_fields = ["reference_number", "check_number", "lease__tenant__username"]
    ordering_fields = ["due_date", "payment_date", "amount", "status"]
    ordering = ["due_date"]

    def get_queryset(self):
        qs = super().get_queryset()
        if _is_tenant(self.request.user):
            qs = qs.filter(lease__tenant=self.request.user)
        return qs

    @action(detail=True, methods=["post"], url_path="record-payment")
    def record_payment(self, request, pk=None):
        payment = self.get_object()
        ser = RecordPaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        payment = payment_services.record_payment(
            payment.pk,
            ser.validated_data["amount"],
            ser.validated_data["method"],
            reference=ser.validated_data.get("reference_number"),
            recorded_by=request.user,
        )
        return Response(self.get_serializer(payment).data)

    @action(detail=True, methods=["post"], url_path="mark-overdue")
    def mark_overdue(self, request, pk=None):
        payment = self.get_object()
        changed = payment_services.mark_payment_overdue(payment.pk, user=request.user)
        payment.refresh_from_db()
        return Response({"marked_overdue": changed, "payment": self.get_serializer(payment).data})

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        payment = self.get_object()
        ser = CancelPaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        payment = payment_services.cancel_payment(payment.pk, ser.validated_data.get("reason"), user=request.user)
        return Response(self.get_serializer(payment).data)


class DocumentViewSet(viewsets.ModelViewSet):
    queryset = Document.objects.select_related("uploaded_by").all()
    serializer_class = DocumentSerializer
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    permission_classes = [IsManagerOrAdmin]
    filterset_class = DocumentFilter
    search_fields = ["title", "file_name", "description"]
    ordering_fields = ["created_at", "document_date", "file_size", "title"]

    def get_queryset(self):
        qs = super().get_queryset()
        user = self.request.user
        if _is_tenant(user):
            lease_ids = Lease.objects.filter(tenant=user).values_list("pk", flat=True)
            payment_ids = Payment.objects.filter(lease__tenant=user).values_list("pk", flat=True)
            qs = qs.filter(
                Q(documentable_type="lease", documentable_id__in=lease_ids)
                | Q(documentable_type="payment", documentable_id__in=payment_ids)
            )
        return qs

    def perform_create(self, serializer):
        serializer.save(uploaded_by=self.request.user)


class DashboardStatsView(APIView):
    permission_classes = [IsAdmin]
    def get(self, request):
        today = timezone.localdate()
        return Response({
            "active_leases": Lease.objects.active().count(),
            "expiring_soon": Lease.objects.expiring_soon(today=today).count(),
            "occupied_units": Unit.objects.filter(status=Unit.Status.OCCUPIED).count(),
            "available_units": Unit.objects.filter(status=Unit.Status.AVAILABLE).count(),
            "outstanding_total": Payment.objects.filter(status__in=Payment.OPEN_STATUSES).aggregate(total=Sum("remaining_amount"))["total"] or 0,
            "overdue_payments": Payment.objects.overdue(today=today).count(),
        })
