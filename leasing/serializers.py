from django.conf import settings
from rest_framework import serializers

from .models import DOCUMENTABLE_MODELS, Document, Lease, Payment


class PaymentSerializer(serializers.ModelSerializer):
    recorded_by_username = serializers.CharField(source="recorded_by.username", read_only=True, allow_null=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    days_overdue = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Payment
        fields = [
            "id", "lease", "amount", "due_date", "payment_date", "payment_method",
            "reference_number", "check_number", "status", "status_display",
            "paid_amount", "remaining_amount", "notes",
            "recorded_by", "recorded_by_username", "is_overdue", "days_overdue",
            "created_at", "updated_at",
        ]
        read_only_fields = [
            "payment_date", "payment_method", "reference_number", "status",
            "paid_amount", "remaining_amount", "recorded_by", "created_at", "updated_at",
        ]
        # Uniqueness of (lease, due_date) is checked in validate() against live rows only.
        validators = []

    def validate(self, data):
        lease = data.get("lease", getattr(self.instance, "lease", None))
        due_date = data.get("due_date", getattr(self.instance, "due_date", None))
        if lease and due_date:
            clash = Payment.objects.filter(lease=lease, due_date=due_date)
            if self.instance:
                clash = clash.exclude(pk=self.instance.pk)
            if clash.exists():
                raise serializers.ValidationError("This lease already has a payment due on that date.")
        if self.instance and "amount" in data and self.instance.paid_amount:
            raise serializers.ValidationError({"amount": "The amount cannot change once payments were recorded."})
        return data


class LeaseSerializer(serializers.ModelSerializer):
    unit_number = serializers.CharField(source="unit.unit_number", read_only=True)
    property_name = serializers.CharField(source="unit.property.name", read_only=True)
    tenant_username = serializers.CharField(source="tenant.username", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    payments_count = serializers.SerializerMethodField(read_only=True)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total_outstanding = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    days_remaining = serializers.IntegerField(read_only=True, allow_null=True)
    duration_in_months = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Lease
        fields = [
            "id", "company", "unit", "unit_number", "property_name",
            "tenant", "tenant_username",
            "start_date", "end_date", "rent_amount", "deposit_amount",
            "payment_frequency", "payment_day", "status", "status_display",
            "termination_date", "termination_reason", "notes", "special_terms",
            "payments_count", "total_paid", "total_outstanding",
            "is_expired", "days_remaining", "duration_in_months",
            "created_at", "updated_at",
        ]
        read_only_fields = ["status", "termination_date", "termination_reason", "created_at", "updated_at"]

    def validate(self, data):
        start_date = data.get("start_date", getattr(self.instance, "start_date", None))
        end_date = data.get("end_date", getattr(self.instance, "end_date", None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({"end_date": "End date must be on or after the start date."})

        company = data.get("company", getattr(self.instance, "company", None))
        unit = data.get("unit", getattr(self.instance, "unit", None))
        if company and unit and unit.property.company_id != company.pk:
            raise serializers.ValidationError({"unit": "The unit does not belong to this company."})
        return data

    def get_payments_count(self, obj):
        # Annotated by LeaseViewSet; falls back to a count query elsewhere.
        count = getattr(obj, "payments_count", None)
        return obj.payments.count() if count is None else count


class TerminateLeaseSerializer(serializers.Serializer):
    reason = serializers.CharField()
    date = serializers.DateField(required=False, allow_null=True)


class RenewLeaseSerializer(serializers.Serializer):
    end_date = serializers.DateField()
    rent_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)


class CancelPaymentSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class RecordPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    method = serializers.ChoiceField(choices=Payment.Method.choices)
    reference_number = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("The payment amount must be greater than zero.")
        return value


class DocumentSerializer(serializers.ModelSerializer):
    uploaded_by_username = serializers.CharField(source="uploaded_by.username", read_only=True, allow_null=True)
    file_url = serializers.CharField(read_only=True)
    file_size_human = serializers.CharField(read_only=True)
    is_image = serializers.BooleanField(read_only=True)
    is_pdf = serializers.BooleanField(read_only=True)

    class Meta:
        model = Document
        fields = [
            "id", "documentable_type", "documentable_id", "title", "file",
            "file_name", "file_type", "file_size", "extension", "file_url", "file_size_human",
            "is_image", "is_pdf", "document_type", "description", "document_date",
            "uploaded_by", "uploaded_by_username", "created_at",
        ]
        read_only_fields = ["file_name", "file_type", "file_size", "extension", "uploaded_by", "created_at"]

    def validate_file(self, upload):
        if upload.size > settings.DOCUMENT_MAX_UPLOAD_SIZE:
            raise serializers.ValidationError("The file is larger than the allowed upload size.")
        content_type = getattr(upload, "content_type", None)
        if content_type and content_type not in settings.DOCUMENT_ALLOWED_TYPES:
            raise serializers.ValidationError(f"Files of type {content_type} are not accepted.")
        return upload

    def validate(self, data):
        kind = data.get("documentable_type", getattr(self.instance, "documentable_type", None))
        object_id = data.get("documentable_id", getattr(self.instance, "documentable_id", None))
        if kind and object_id is not None:
            if not DOCUMENTABLE_MODELS[kind]._default_manager.filter(pk=object_id).exists():
                raise serializers.ValidationError({"documentable_id": f"No {kind} with id {object_id}."})
        return data
