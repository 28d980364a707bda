import mimetypes
import os
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q, Sum
from django.utils import timezone

from core.models import Company, Property, Unit

User = settings.AUTH_USER_MODEL
ZERO = Decimal("0.00")


# --- Soft delete -------------------------------------------------------------

class SoftDeleteQuerySet(models.QuerySet):
    def delete(self):
        return self.update(deleted_at=timezone.now())

    def hard_delete(self):
        return super().delete()


class SoftDeleteManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class SoftDeleteModel(models.Model):
    deleted_at = models.DateTimeField(null=True, blank=True, editable=False)

    class Meta:
        abstract = True

    def delete(self, using=None, keep_parents=False):
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])

    def hard_delete(self, using=None, keep_parents=False):
        return super().delete(using=using, keep_parents=keep_parents)

    def restore(self):
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])

    @property
    def is_deleted(self):
        return self.deleted_at is not None


# --- Lease -------------------------------------------------------------------

class LeaseQuerySet(SoftDeleteQuerySet):
    def active(self):
        return self.filter(status=Lease.Status.ACTIVE)

    def expiring_soon(self, days=None, today=None):
        days = settings.LEASE_EXPIRING_SOON_DAYS if days is None else days
        today = today or timezone.localdate()
        return self.active().filter(
            end_date__isnull=False,
            end_date__range=(today, today + relativedelta(days=days)),
        )

    def expired(self, today=None):
        today = today or timezone.localdate()
        return self.active().filter(end_date__isnull=False, end_date__lt=today)


LeaseManager = SoftDeleteManager.from_queryset(LeaseQuerySet)


class Lease(SoftDeleteModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        EXPIRED = "expired", "Expired"
        TERMINATED = "terminated", "Terminated"
        RENEWED = "renewed", "Renewed"

    class Frequency(models.TextChoices):
        MONTHLY = "monthly", "Monthly"
        QUARTERLY = "quarterly", "Quarterly"
        SEMI_ANNUALLY = "semi_annually", "Semi-Annually"
        YEARLY = "yearly", "Yearly"

    TERMINAL_STATUSES = (Status.TERMINATED, Status.RENEWED)

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="leases")
    unit = models.ForeignKey(Unit, on_delete=models.CASCADE, related_name="leases")
    tenant = models.ForeignKey(User, on_delete=models.CASCADE, related_name="leases")
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True, help_text="Leave empty for an open-ended lease")
    rent_amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    payment_frequency = models.CharField(max_length=15, choices=Frequency.choices, default=Frequency.MONTHLY)
    payment_day = models.PositiveSmallIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(28)], help_text="Day of month rent is due"
    )
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.DRAFT)
    termination_date = models.DateField(null=True, blank=True)
    termination_reason = models.TextField(null=True, blank=True)
    notes = models.TextField(blank=True)
    special_terms = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LeaseManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "leases"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company", "status"], name="lease_company_status_idx"),
            models.Index(fields=["unit", "status"], name="lease_unit_status_idx"),
            models.Index(fields=["tenant"], name="lease_tenant_idx"),
            models.Index(fields=["start_date"], name="lease_start_date_idx"),
            models.Index(fields=["end_date"], name="lease_end_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__isnull=True) | Q(end_date__gte=F("start_date")),
                name="lease_end_on_or_after_start",
            ),
            models.CheckConstraint(
                condition=Q(payment_day__gte=1, payment_day__lte=28),
                name="lease_payment_day_1_28",
            ),
        ]

    def __str__(self): return f"Lease #{self.pk} - {self.unit}"

    def clean(self):
        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must be on or after the start date."})

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    @property
    def is_expired(self):
        return bool(self.end_date) and self.end_date < timezone.localdate()

    @property
    def days_remaining(self):
        if not self.end_date or self.is_expired:
            return None
        return (self.end_date - timezone.localdate()).days

    @property
    def duration_in_months(self):
        if not self.end_date:
            return None
        delta = relativedelta(self.end_date, self.start_date)
        return delta.years * 12 + delta.months

    @property
    def total_paid(self):
        agg = self.payments.filter(status=Payment.Status.PAID).aggregate(s=Sum("paid_amount"))
        return agg["s"] or ZERO

    @property
    def total_outstanding(self):
        agg = self.payments.filter(status__in=Payment.OPEN_STATUSES).aggregate(s=Sum("remaining_amount"))
        return agg["s"] or ZERO

    @property
    def documents(self):
        return Document.objects.for_object(self)


# --- Payment -----------------------------------------------------------------

class PaymentQuerySet(SoftDeleteQuerySet):
    def pending(self):
        return self.filter(status=Payment.Status.PENDING)

    def paid(self):
        return self.filter(status=Payment.Status.PAID)

    def overdue(self, today=None):
        today = today or timezone.localdate()
        return self.filter(
            Q(status=Payment.Status.OVERDUE) | Q(status=Payment.Status.PENDING, due_date__lt=today)
        )


PaymentManager = SoftDeleteManager.from_queryset(PaymentQuerySet)


class Payment(SoftDeleteModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        OVERDUE = "overdue", "Overdue"
        PARTIAL = "partial", "Partial"
        CANCELLED = "cancelled", "Cancelled"

    class Method(models.TextChoices):
        CASH = "cash", "Cash"
        BANK_TRANSFER = "bank_transfer", "Bank Transfer"
        CHECK = "check", "Check"
        CREDIT_CARD = "credit_card", "Credit Card"
        ONLINE = "online", "Online Payment"
        OTHER = "other", "Other"

    OPEN_STATUSES = (Status.PENDING, Status.OVERDUE, Status.PARTIAL)
    TERMINAL_STATUSES = (Status.PAID, Status.CANCELLED)

    lease = models.ForeignKey(Lease, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    due_date = models.DateField()
    payment_date = models.DateField(null=True, blank=True)
    payment_method = models.CharField(max_length=15, choices=Method.choices, null=True, blank=True)
    reference_number = models.CharField(max_length=100, null=True, blank=True)
    check_number = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    remaining_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="recorded_payments")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PaymentManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "payments"
        ordering = ["due_date"]
        indexes = [
            models.Index(fields=["lease", "status"], name="payment_lease_status_idx"),
            models.Index(fields=["payment_date"], name="payment_payment_date_idx"),
            models.Index(fields=["due_date"], name="payment_due_date_idx"),
            models.Index(fields=["status"], name="payment_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["lease", "due_date"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_payment_due_date_per_lease",
            )
        ]

    def __str__(self): return f"{self.lease} due {self.due_date} ({self.status})"

    def save(self, *args, **kwargs):
        # Open balances always follow amount and paid_amount.
        if self.status in self.OPEN_STATUSES:
            self.remaining_amount = max(self.amount - self.paid_amount, ZERO)
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = {*update_fields, "remaining_amount"}
        super().save(*args, **kwargs)

    @property
    def is_paid(self):
        return self.status == self.Status.PAID

    @property
    def is_overdue(self):
        if self.status == self.Status.OVERDUE:
            return True
        return self.status == self.Status.PENDING and self.due_date < timezone.localdate()

    @property
    def days_overdue(self):
        if not self.is_overdue:
            return None
        return (timezone.localdate() - self.due_date).days

    @property
    def documents(self):
        return Document.objects.for_object(self)


# --- Document ----------------------------------------------------------------

def document_upload_path(instance, filename):
    return f"documents/{instance.documentable_type}/{instance.documentable_id}/{filename}"


class DocumentQuerySet(SoftDeleteQuerySet):
    def delete(self):
        count = 0
        for document in self:
            document.delete()
            count += 1
        return count

    def for_object(self, obj):
        return self.filter(documentable_type=documentable_kind(obj), documentable_id=obj.pk)


DocumentManager = SoftDeleteManager.from_queryset(DocumentQuerySet)


class Document(SoftDeleteModel):
    class DocumentableType(models.TextChoices):
        LEASE = "lease", "Lease"
        PAYMENT = "payment", "Payment"
        PROPERTY = "property", "Property"
        UNIT = "unit", "Unit"

    class Type(models.TextChoices):
        CONTRACT = "contract", "Contract"
        RECEIPT = "receipt", "Receipt"
        INVOICE = "invoice", "Invoice"
        ID_DOCUMENT = "id_document", "ID Document"
        PROOF_OF_INCOME = "proof_of_income", "Proof of Income"
        MAINTENANCE_REPORT = "maintenance_report", "Maintenance Report"
        INSPECTION_REPORT = "inspection_report", "Inspection Report"
        OTHER = "other", "Other"

    IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "svg")

    documentable_type = models.CharField(max_length=10, choices=DocumentableType.choices)
    documentable_id = models.PositiveBigIntegerField()
    title = models.CharField(max_length=255)
    file = models.FileField(upload_to=document_upload_path, db_column="file_path", max_length=255)
    file_name = models.CharField(max_length=255, blank=True)
    file_type = models.CharField(max_length=100, null=True, blank=True)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    extension = models.CharField(max_length=10, null=True, blank=True)
    document_type = models.CharField(max_length=20, choices=Type.choices, default=Type.OTHER)
    description = models.TextField(blank=True)
    document_date = models.DateField(null=True, blank=True)
    uploaded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="uploaded_documents")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DocumentManager()
    all_objects = models.Manager()

    class Meta:
        db_table = "documents"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["documentable_type", "documentable_id"], name="document_documentable_idx"),
            models.Index(fields=["document_type"], name="document_type_idx"),
        ]

    def __str__(self): return self.title

    def save(self, *args, **kwargs):
        if self._state.adding and self.file:
            self.capture_file_metadata()
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        self.delete_stored_file()
        super().delete(using=using, keep_parents=keep_parents)

    def hard_delete(self, using=None, keep_parents=False):
        self.delete_stored_file()
        return super().hard_delete(using=using, keep_parents=keep_parents)

    def capture_file_metadata(self):
        """Record name, MIME type, size and extension of a fresh upload."""
        name = os.path.basename(self.file.name)
        upload = getattr(self.file, "file", None)
        self.file_name = self.file_name or name
        self.file_type = getattr(upload, "content_type", None) or mimetypes.guess_type(name)[0]
        self.file_size = self.file.size
        self.extension = os.path.splitext(name)[1].lstrip(".").lower()[:10] or None

    def delete_stored_file(self):
        if self.file and self.file.storage.exists(self.file.name):
            self.file.storage.delete(self.file.name)

    @property
    def documentable(self):
        model = DOCUMENTABLE_MODELS[self.documentable_type]
        return model._default_manager.filter(pk=self.documentable_id).first()

    @property
    def file_url(self):
        return self.file.url if self.file else ""

    @property
    def file_size_human(self):
        if not self.file_size:
            return "Unknown"
        size = self.file_size
        units = ["B", "KB", "MB", "GB"]
        i = 0
        while size > 1024 and i < len(units) - 1:
            size /= 1024
            i += 1
        return f"{round(size, 2):g} {units[i]}"

    @property
    def is_image(self):
        return self.extension in self.IMAGE_EXTENSIONS

    @property
    def is_pdf(self):
        return self.extension == "pdf"


DOCUMENTABLE_MODELS = {
    "lease": Lease,
    "payment": Payment,
    "property": Property,
    "unit": Unit,
}


def documentable_kind(obj):
    for kind, model in DOCUMENTABLE_MODELS.items():
        if isinstance(obj, model):
            return kind
    raise ValueError(f"{type(obj).__name__} cannot own documents")
