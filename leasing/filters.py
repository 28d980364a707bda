import django_filters
from django.utils import timezone

from .models import Document, Lease, Payment


class LeaseFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Lease.Status.choices)
    property = django_filters.NumberFilter(field_name="unit__property")
    expiring_soon = django_filters.BooleanFilter(method="filter_expiring_soon")
    expired = django_filters.BooleanFilter(method="filter_expired")

    class Meta:
        model = Lease
        fields = ["status", "company", "unit", "tenant", "payment_frequency", "property"]

    def filter_expiring_soon(self, queryset, name, value):
        return queryset.expiring_soon() if value else queryset

    def filter_expired(self, queryset, name, value):
        return queryset.expired() if value else queryset


class PaymentFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Payment.Status.choices)
    due_from = django_filters.DateFilter(field_name="due_date", lookup_expr="gte")
    due_until = django_filters.DateFilter(field_name="due_date", lookup_expr="lte")
    overdue = django_filters.BooleanFilter(method="filter_overdue")
    unpaid = django_filters.BooleanFilter(method="filter_unpaid")

    class Meta:
        model = Payment
        fields = ["lease", "status", "payment_method", "due_from", "due_until"]

    def filter_overdue(self, queryset, name, value):
        return queryset.overdue(today=timezone.localdate()) if value else queryset

    def filter_unpaid(self, queryset, name, value):
        return queryset.filter(status__in=Payment.OPEN_STATUSES) if value else queryset


class DocumentFilter(django_filters.FilterSet):
    class Meta:
        model = Document
        fields = ["documentable_type", "documentable_id", "document_type", "extension"]
