"""
Insurance record lifecycle.

Mandatory traffic and comprehensive policies feed the vehicle's cached
expiry fields; each mutation re-reconciles every (vehicle, sub-type) scope
it touched before returning. Supplementary liability policies are history
only.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.exceptions import NotFound
from apps.fleet.expiry import INSURANCE_FIELDS, reconcile_insurance_expiry
from apps.fleet.models import Vehicle

from .forms import InsuranceRecordForm
from .models import InsuranceRecord

logger = logging.getLogger(__name__)

RECONCILE_FIELDS = ("vehicle_id", "sub_type", "valid_until")


@dataclass
class RecordResult:
    record: InsuranceRecord
    vehicle_expiry: Optional[date]


def _vehicles(vehicles):
    return vehicles if vehicles is not None else Vehicle.objects.all()


def _require_vehicle(vehicle_ref, vehicles) -> Vehicle:
    if vehicle_ref in (None, ""):
        raise ValidationError({"vehicle": ["This field is required."]})
    try:
        vehicle_id = int(vehicle_ref)
    except (TypeError, ValueError):
        raise ValidationError({"vehicle": ["Enter a whole number."]})

    vehicle = _vehicles(vehicles).filter(pk=vehicle_id).first()
    if vehicle is None:
        raise NotFound(f"Vehicle {vehicle_id} not found.")
    return vehicle


def get_policy(pk: int, vehicles=None) -> InsuranceRecord:
    record = (
        InsuranceRecord.objects
        .filter(pk=pk, vehicle__in=_vehicles(vehicles))
        .select_related("vehicle")
        .first()
    )
    if record is None:
        raise NotFound(f"Insurance record {pk} not found.")
    return record


def sync_vehicle_expiry(scopes: Iterable[tuple[int, str]]) -> dict[tuple[int, str], Optional[date]]:
    """Reconcile each (vehicle_id, sub_type) pair that feeds a vehicle field."""
    result = {}
    for vehicle_id, sub_type in sorted(set(scopes)):
        if vehicle_id and sub_type in INSURANCE_FIELDS:
            result[(vehicle_id, sub_type)] = reconcile_insurance_expiry(vehicle_id, sub_type)
    return result


def _current_expiry(record: InsuranceRecord) -> Optional[date]:
    field = INSURANCE_FIELDS.get(record.sub_type)
    if field is None:
        return None
    return Vehicle.objects.filter(pk=record.vehicle_id).values_list(field, flat=True).first()


def _form_errors(form) -> ValidationError:
    return ValidationError({field: list(errors) for field, errors in form.errors.items()})


def create_policy(data: dict, user=None, vehicles=None) -> RecordResult:
    vehicle = _require_vehicle(data.get("vehicle"), vehicles)

    form = InsuranceRecordForm(data, vehicles=_vehicles(vehicles))
    if not form.is_valid():
        raise _form_errors(form)

    with transaction.atomic():
        record = form.save(commit=False)
        if user is not None and getattr(user, "is_authenticated", False):
            record.created_by = user
        record.save()
        sync_vehicle_expiry([(vehicle.pk, record.sub_type)])
        expiry = _current_expiry(record)

    logger.info("Insurance %s (%s) created for %s, valid until %s", record.pk, record.sub_type, vehicle.plate, record.valid_until)
    return RecordResult(record=record, vehicle_expiry=expiry)


def update_policy(pk: int, data: dict, vehicles=None) -> RecordResult:
    """
    Partial update. A sub-type or vehicle change reconciles both the old and
    the new scope.
    """
    record = get_policy(pk, vehicles)
    before = {f: getattr(record, f) for f in RECONCILE_FIELDS}

    merged = _initial(record)
    merged.update(data)
    if "vehicle" in data:
        _require_vehicle(data.get("vehicle"), vehicles)

    form = InsuranceRecordForm(merged, instance=record, vehicles=_vehicles(vehicles))
    if not form.is_valid():
        raise _form_errors(form)

    with transaction.atomic():
        record = form.save()
        after = {f: getattr(record, f) for f in RECONCILE_FIELDS}
        if before != after:
            sync_vehicle_expiry([
                (before["vehicle_id"], before["sub_type"]),
                (after["vehicle_id"], after["sub_type"]),
            ])
        expiry = _current_expiry(record)

    return RecordResult(record=record, vehicle_expiry=expiry)


def delete_policy(pk: int, vehicles=None) -> Optional[date]:
    """Delete a policy and return the recomputed expiry of its scope (None for history-only types)."""
    record = get_policy(pk, vehicles)
    scope = (record.vehicle_id, record.sub_type)

    with transaction.atomic():
        record.delete()
        expiry = sync_vehicle_expiry([scope]).get(scope)

    logger.info("Insurance %s deleted; vehicle %s %s expiry now %s", pk, scope[0], scope[1], expiry)
    return expiry


def _initial(record: InsuranceRecord) -> dict:
    return {
        "vehicle": record.vehicle_id,
        "sub_type": record.sub_type,
        "policy_number": record.policy_number,
        "insurer": record.insurer,
        "agency": record.agency,
        "start_date": record.start_date,
        "valid_until": record.valid_until,
        "premium": record.premium,
        "payment_status": record.payment_status,
        "payment_plan": record.payment_plan,
        "installment_count": record.installment_count,
        "paid_on": record.paid_on,
        "coverage_notes": record.coverage_notes,
        "notes": record.notes,
    }
