"""
Expiry reconciler.

The vehicle's ``*_expiry`` columns cache the latest ``valid_until`` of its
qualifying records. This module is their only writer. Each reconcile locks
the vehicle row, aggregates the persisted records and writes the result in
one transaction, so a failure leaves the previous value in place.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import DatabaseError, transaction
from django.db.models import Max

from apps.core.exceptions import NotFound, ReconciliationFailure
from apps.inspections.models import InspectionRecord
from apps.insurance.models import InsuranceRecord

from .models import Vehicle

logger = logging.getLogger(__name__)

INSURANCE_FIELDS = {
    InsuranceRecord.TYPE_TRAFFIC: "traffic_insurance_expiry",
    InsuranceRecord.TYPE_COMPREHENSIVE: "comprehensive_insurance_expiry",
}


def _reconcile(vehicle_id: int, field: str, records) -> Optional[date]:
    try:
        with transaction.atomic():
            vehicle = Vehicle.objects.select_for_update().filter(pk=vehicle_id).first()
            if vehicle is None:
                raise NotFound(f"Vehicle {vehicle_id} not found.")

            latest = records.aggregate(latest=Max("valid_until"))["latest"]

            if getattr(vehicle, field) != latest:
                Vehicle.objects.filter(pk=vehicle_id).update(**{field: latest})
                logger.info("Vehicle %s %s: %s -> %s", vehicle.plate, field, getattr(vehicle, field), latest)
            return latest
    except DatabaseError as exc:
        logger.exception("Reconciling %s for vehicle %s failed", field, vehicle_id)
        raise ReconciliationFailure(f"Could not reconcile {field} for vehicle {vehicle_id}: {exc}") from exc


def reconcile_inspection_expiry(vehicle_id: int) -> Optional[date]:
    """Latest ``valid_until`` of the vehicle's passed inspections, or None."""
    records = InspectionRecord.objects.filter(
        vehicle_id=vehicle_id,
        outcome=InspectionRecord.OUTCOME_PASSED,
    )
    return _reconcile(vehicle_id, "inspection_expiry", records)


def reconcile_insurance_expiry(vehicle_id: int, sub_type: str) -> Optional[date]:
    """Latest ``valid_until`` of the vehicle's policies of ``sub_type``, or None."""
    field = INSURANCE_FIELDS.get(sub_type)
    if field is None:
        raise ValueError(f"Insurance type {sub_type!r} does not feed a vehicle expiry field.")

    records = InsuranceRecord.objects.filter(vehicle_id=vehicle_id, sub_type=sub_type)
    return _reconcile(vehicle_id, field, records)


def reconcile_vehicle(vehicle_id: int) -> dict[str, Optional[date]]:
    """Re-establish every expiry field of one vehicle."""
    result = {"inspection_expiry": reconcile_inspection_expiry(vehicle_id)}
    for sub_type, field in INSURANCE_FIELDS.items():
        result[field] = reconcile_insurance_expiry(vehicle_id, sub_type)
    return result
