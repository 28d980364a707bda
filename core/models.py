import builtins

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Company(models.Model):
    name = models.CharField(max_length=150, unique=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = "companies"
    def __str__(self): return self.name


class Profile(models.Model):
    ROLE_CHOICES = [("ADMIN", "Administrator"), ("MANAGER", "Property manager"), ("TENANT", "Tenant")]
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    company = models.ForeignKey(Company, on_delete=models.SET_NULL, null=True, blank=True, related_name="profiles")
    full_name = models.CharField(max_length=150, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="TENANT")
    class Meta:
        db_table = "profiles"
    def __str__(self): return f"{self.full_name or self.user.username} ({self.role})"


class Property(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name="properties")
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    class Meta:
        db_table = "properties"
        ordering = ["name"]
        verbose_name_plural = "properties"
    def __str__(self): return self.name


class Unit(models.Model):
    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        OCCUPIED = "occupied", "Occupied"
        MAINTENANCE = "maintenance", "Maintenance"
        RESERVED = "reserved", "Reserved"

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="units")
    unit_number = models.CharField(max_length=30)
    rent_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.AVAILABLE)
    type = models.CharField(max_length=50, blank=True)
    class Meta:
        db_table = "units"
        ordering = ["property", "unit_number"]
        constraints = [
            models.UniqueConstraint(fields=["property", "unit_number"], name="uniq_unit_number_per_property")
        ]
    def __str__(self): return f"{self.property.name} - Unit {self.unit_number}"

    # `property` is the ForeignKey above inside this class body.
    @builtins.property
    def is_available(self):
        return self.status == self.Status.AVAILABLE


class ActivityLog(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=255)
    timestamp = models.DateTimeField(auto_now_add=True)
    details = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "activity_logs"
        ordering = ['-timestamp']
    def __str__(self):
        who = self.user.username if self.user else "system"
        return f'{who} - {self.action} at {self.timestamp.strftime("%Y-%m-%d %H:%M")}'
