from django import forms
from django.conf import settings
from django.contrib import admin, messages
from django.utils import timezone

from .exceptions import LeasingError
from .models import Document, Lease, Payment
from .services import leases as lease_services
from .services import payments as payment_services


class ExpiringSoonFilter(admin.SimpleListFilter):
    title = "expiring soon"
    parameter_name = "expiring_soon"

    def lookups(self, request, model_admin):
        return (("yes", f"Within the next {settings.LEASE_EXPIRING_SOON_DAYS} days"),)

    def queryset(self, request, queryset):
        if self.value() == "yes":
            return queryset.expiring_soon()
        return queryset


class ExpiredFilter(admin.SimpleListFilter):
    title = "past end date"
    parameter_name = "past_end_date"

    def lookups(self, request, model_admin):
        return (("yes", "Active but past end date"),)

    def queryset(self, request, queryset):
        if self.value() == "yes":
            return queryset.expired()
        return queryset


def _run(modeladmin, request, queryset, operation, success):
    done = 0
    for obj in queryset:
        try:
            operation(obj)
        except LeasingError as exc:
            modeladmin.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
        else:
            done += 1
    if done:
        modeladmin.message_user(request, success.format(count=done), level=messages.SUCCESS)


class PaymentForm(forms.ModelForm):
    class Meta:
        model = Payment
        fields = "__all__"

    def clean_amount(self):
        amount = self.cleaned_data["amount"]
        if self.instance.pk and self.instance.paid_amount and amount != self.instance.amount:
            raise forms.ValidationError("The amount cannot change once payments were recorded.")
        return amount


class PaymentInline(admin.TabularInline):
    model = Payment
    form = PaymentForm
    extra = 0
    fields = ("due_date", "amount", "paid_amount", "remaining_amount", "status", "payment_date", "payment_method")
    readonly_fields = ("paid_amount", "remaining_amount", "status", "payment_date", "payment_method")
    ordering = ("due_date",)


@admin.register(Lease)
class LeaseAdmin(admin.ModelAdmin):
    list_display = ("id", "property_name", "unit", "tenant", "rent_amount", "start_date", "end_date", "status",
                    "payments_count", "total_paid", "total_outstanding")
    list_filter = ("status", "payment_frequency", "unit__property", ExpiringSoonFilter, ExpiredFilter)
    search_fields = ("unit__unit_number", "unit__property__name", "tenant__username", "tenant__email")
    readonly_fields = ("status", "termination_date", "termination_reason", "created_at", "updated_at")
    list_select_related = ("unit", "unit__property", "tenant")
    date_hierarchy = "start_date"
    inlines = [PaymentInline]
    actions = ["activate", "generate_payments", "terminate"]

    def property_name(self, obj):
        return obj.unit.property.name
    property_name.short_description = "Property"

    def payments_count(self, obj):
        return obj.payments.count()
    payments_count.short_description = "Payments"

    def total_paid(self, obj):
        return obj.total_paid
    total_paid.short_description = "Paid"

    def total_outstanding(self, obj):
        return obj.total_outstanding
    total_outstanding.short_description = "Outstanding"

    @admin.action(description="Activate selected draft leases")
    def activate(self, request, queryset):
        _run(self, request, queryset,
             lambda lease: lease_services.activate_lease(lease.pk, user=request.user),
             "{count} leases activated.")

    @admin.action(description="Generate payment schedule")
    def generate_payments(self, request, queryset):
        created = 0
        for lease in queryset:
            try:
                result = lease_services.generate_payment_schedule(lease.pk, user=request.user)
            except LeasingError as exc:
                self.message_user(request, f"{lease}: {exc}", level=messages.ERROR)
                continue
            if not result["generated"]:
                self.message_user(request, f"{lease}: only active leases get a payment schedule.", level=messages.WARNING)
            created += result["created"]
        self.message_user(request, f"Payment schedule generated ({created} new payments).", level=messages.SUCCESS)

    @admin.action(description="Terminate selected leases")
    def terminate(self, request, queryset):
        _run(self, request, queryset,
             lambda lease: lease_services.terminate_lease(lease.pk, "Terminated from the admin", user=request.user),
             "{count} leases terminated.")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    form = PaymentForm
    list_display = ("id", "lease", "due_date", "amount", "paid_amount", "remaining_amount", "status",
                    "payment_date", "payment_method", "recorded_by")
    list_filter = ("status", "payment_method", "due_date")
    search_fields = ("reference_number", "check_number", "lease__tenant__username", "lease__unit__unit_number")
    # Status only moves through the payment services.
    readonly_fields = ("status", "paid_amount", "remaining_amount", "payment_date", "recorded_by", "created_at", "updated_at")
    list_select_related = ("lease", "lease__unit", "lease__unit__property", "recorded_by")
    actions = ["mark_overdue", "cancel"]

    def get_readonly_fields(self, request, obj=None):
        fields = super().get_readonly_fields(request, obj)
        if obj is not None and obj.paid_amount:
            return ("amount", *fields)
        return fields

    @admin.action(description="Mark past-due pending payments as overdue")
    def mark_overdue(self, request, queryset):
        today = timezone.localdate()
        changed = sum(payment_services.mark_payment_overdue(p.pk, today=today, user=request.user) for p in queryset)
        self.message_user(request, f"{changed} payments marked as overdue.", level=messages.SUCCESS)

    @admin.action(description="Cancel selected unpaid payments")
    def cancel(self, request, queryset):
        _run(self, request, queryset,
             lambda payment: payment_services.cancel_payment(payment.pk, "Cancelled from the admin", user=request.user),
             "{count} payments cancelled.")


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ("title", "documentable_type", "documentable_id", "document_type", "file_name",
                    "file_size_human", "extension", "uploaded_by", "created_at")
    list_filter = ("document_type", "documentable_type", "extension")
    search_fields = ("title", "file_name", "description")
    readonly_fields = ("file_name", "file_type", "file_size", "extension", "uploaded_by", "created_at")

    def file_size_human(self, obj):
        return obj.file_size_human
    file_size_human.short_description = "Size"

    def save_model(self, request, obj, form, change):
        if not change and obj.uploaded_by_id is None:
            obj.uploaded_by = request.user
        super().save_model(request, obj, form, change)
