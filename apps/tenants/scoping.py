"""
Role-based visibility for fleet data.

Scopes are ``Q`` predicates over ``Vehicle`` (or a related model through
``prefix``) so the compliance logic itself never branches on roles.
"""
from __future__ import annotations

from django.db.models import Q

from .models import TenantMembership


def vehicle_scope(user, membership: TenantMembership | None, prefix: str = "") -> Q:
    """
    - superuser: every vehicle
    - admin / company manager: vehicles of the membership's tenant
    - location chief: vehicles at the membership's location
    - anything else: nothing
    """
    if user is not None and getattr(user, "is_superuser", False):
        return Q()

    if membership is None:
        return Q(**{f"{prefix}pk__in": []})

    if membership.role in (TenantMembership.ROLE_ADMIN, TenantMembership.ROLE_COMPANY_MANAGER):
        return Q(**{f"{prefix}tenant_id": membership.tenant_id})

    if membership.role == TenantMembership.ROLE_LOCATION_CHIEF and membership.location_id:
        return Q(**{f"{prefix}location_id": membership.location_id})

    return Q(**{f"{prefix}pk__in": []})


def scoped_vehicles(request):
    from apps.fleet.models import Vehicle

    return Vehicle.objects.filter(vehicle_scope(request.user, getattr(request, "tenant_membership", None)))


def can_delete_records(user, membership: TenantMembership | None) -> bool:
    if getattr(user, "is_superuser", False):
        return True
    return bool(membership and membership.role != TenantMembership.ROLE_LOCATION_CHIEF)
