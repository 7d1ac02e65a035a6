"""
Inspection record lifecycle.

Every create, update and delete re-runs the inspection expiry reconciler for
the affected vehicle(s) inside the same transaction, before returning.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.exceptions import NotFound
from apps.fleet.expiry import reconcile_inspection_expiry
from apps.fleet.models import Vehicle

from .forms import InspectionRecordForm
from .models import InspectionRecord

logger = logging.getLogger(__name__)

# Changing any of these can change which record is the latest passed one
RECONCILE_FIELDS = ("vehicle_id", "outcome", "valid_until")


@dataclass
class RecordResult:
    record: InspectionRecord
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


def get_inspection(pk: int, vehicles=None) -> InspectionRecord:
    record = (
        InspectionRecord.objects
        .filter(pk=pk, vehicle__in=_vehicles(vehicles))
        .select_related("vehicle")
        .first()
    )
    if record is None:
        raise NotFound(f"Inspection {pk} not found.")
    return record


def _form_errors(form) -> ValidationError:
    return ValidationError({field: list(errors) for field, errors in form.errors.items()})


def sync_vehicle_expiry(vehicle_ids: Iterable[int]) -> dict[int, Optional[date]]:
    return {vid: reconcile_inspection_expiry(vid) for vid in sorted(set(vehicle_ids)) if vid}


def create_inspection(data: dict, user=None, vehicles=None) -> RecordResult:
    vehicle = _require_vehicle(data.get("vehicle"), vehicles)

    form = InspectionRecordForm(data, vehicles=_vehicles(vehicles))
    if not form.is_valid():
        raise _form_errors(form)

    with transaction.atomic():
        record = form.save(commit=False)
        if user is not None and getattr(user, "is_authenticated", False):
            record.created_by = user
        record.save()
        expiry = reconcile_inspection_expiry(vehicle.pk)

    logger.info("Inspection %s created for %s (%s, valid until %s)", record.pk, vehicle.plate, record.outcome, record.valid_until)
    return RecordResult(record=record, vehicle_expiry=expiry)


def update_inspection(pk: int, data: dict, vehicles=None) -> RecordResult:
    """
    Partial update: fields missing from ``data`` keep their stored values.
    """
    record = get_inspection(pk, vehicles)
    before = {f: getattr(record, f) for f in RECONCILE_FIELDS}

    merged = _initial(record)
    merged.update(data)
    if "vehicle" in data:
        _require_vehicle(data.get("vehicle"), vehicles)

    form = InspectionRecordForm(merged, instance=record, vehicles=_vehicles(vehicles))
    if not form.is_valid():
        raise _form_errors(form)

    with transaction.atomic():
        record = form.save()
        after = {f: getattr(record, f) for f in RECONCILE_FIELDS}
        if before != after:
            expiries = sync_vehicle_expiry([before["vehicle_id"], after["vehicle_id"]])
            expiry = expiries[record.vehicle_id]
        else:
            expiry = Vehicle.objects.filter(pk=record.vehicle_id).values_list("inspection_expiry", flat=True).first()

    return RecordResult(record=record, vehicle_expiry=expiry)


def delete_inspection(pk: int, vehicles=None) -> Optional[date]:
    """Delete a record and return the vehicle's recomputed inspection expiry."""
    record = get_inspection(pk, vehicles)
    vehicle_id = record.vehicle_id

    with transaction.atomic():
        record.delete()
        expiry = reconcile_inspection_expiry(vehicle_id)

    logger.info("Inspection %s deleted; vehicle %s inspection expiry now %s", pk, vehicle_id, expiry)
    return expiry


def _initial(record: InspectionRecord) -> dict:
    return {
        "vehicle": record.vehicle_id,
        "inspection_date": record.inspection_date,
        "valid_until": record.valid_until,
        "outcome": record.outcome,
        "kind": record.kind,
        "station": record.station,
        "region": record.region,
        "report_number": record.report_number,
        "fee": record.fee,
        "failure_reason": record.failure_reason,
        "failure_detail": record.failure_detail,
        "notes": record.notes,
    }
