from django.conf import settings
from django.db import models
from django.utils.text import slugify

class Tenant(models.Model):
    """An operating company. Vehicles and locations are scoped to one tenant."""
    name = models.CharField(max_length=150, unique=True)
    slug = models.SlugField(max_length=160, unique=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.name)[:150] or "tenant"
            slug = base
            i = 2
            while Tenant.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base}-{i}"
                i += 1
            self.slug = slug
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Location(models.Model):
    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="locations")
    name = models.CharField(max_length=150)

    responsible_name = models.CharField(max_length=150, blank=True)
    # Receives the immediate expiry alert for vehicles parked at this site
    responsible_email = models.EmailField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["tenant__name", "name"]
        unique_together = ("tenant", "name")

    def __str__(self):
        return self.name


class TenantMembership(models.Model):
    ROLE_ADMIN = "admin"
    ROLE_COMPANY_MANAGER = "company_manager"
    ROLE_LOCATION_CHIEF = "location_chief"
    ROLE_CHOICES = [
        (ROLE_ADMIN, "Admin"),
        (ROLE_COMPANY_MANAGER, "Company Manager"),
        (ROLE_LOCATION_CHIEF, "Location Chief"),
    ]

    # Roles that receive the weekly compliance digest
    DIGEST_ROLES = (ROLE_ADMIN, ROLE_COMPANY_MANAGER)

    tenant = models.ForeignKey(Tenant, on_delete=models.CASCADE, related_name="memberships")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="tenant_memberships")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_LOCATION_CHIEF)
    location = models.ForeignKey(
        Location,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="memberships",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("tenant", "user")

    def __str__(self):
        return f"{self.user} → {self.tenant} ({self.role})"
