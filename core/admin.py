from django.contrib import admin

from .models import ActivityLog, Company, Profile, Property, Unit


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "phone")
    search_fields = ("name", "email")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "company", "address")
    list_filter = ("company",)
    search_fields = ("name", "address")


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("id", "unit_number", "property", "rent_price", "status", "type")
    list_filter = ("status", "property")
    search_fields = ("unit_number", "property__name")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "full_name", "phone", "role", "company")
    list_filter = ("role", "company")
    search_fields = ("full_name", "user__username", "user__email")


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "user", "action", "details")
    list_filter = ("action",)
    search_fields = ("user__username", "details")
    readonly_fields = ("user", "action", "timestamp", "details")
