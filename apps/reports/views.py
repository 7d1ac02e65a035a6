import io

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from apps.fleet.alarms import AlarmState, vehicle_alarms
from apps.inspections.models import InspectionRecord
from apps.insurance.models import InsuranceRecord
from apps.tenants.scoping import scoped_vehicles

ALARM_FILLS = {
    AlarmState.EXPIRED.value: PatternFill("solid", fgColor="FECACA"),
    AlarmState.APPROACHING.value: PatternFill("solid", fgColor="FEF3C7"),
}

VEHICLE_HEADERS = [
    "Plate", "Company", "Location", "Status", "Make", "Model", "Year",
    "Inspection Expiry", "Inspection Days", "Inspection Alarm",
    "Traffic Insurance Expiry", "Traffic Insurance Days", "Traffic Insurance Alarm",
    "Comprehensive Expiry", "Comprehensive Days", "Comprehensive Alarm",
]

INSPECTION_HEADERS = [
    "Plate", "Inspection Date", "Valid Until", "Outcome", "Kind", "Station",
    "Region", "Report No", "Fee", "Failure Reason", "Notes",
]

INSURANCE_HEADERS = [
    "Plate", "Type", "Policy No", "Insurer", "Agency", "Start Date", "Valid Until",
    "Premium", "Payment Status", "Payment Plan", "Installments", "Paid On", "Notes",
]


def _xlsx_response(wb: Workbook, filename: str) -> HttpResponse:
    bio = io.BytesIO()
    wb.save(bio)
    bio.seek(0)

    resp = HttpResponse(
        bio.getvalue(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


def _autosize_columns(ws):
    for col in range(1, ws.max_column + 1):
        max_len = 0
        for row in range(1, ws.max_row + 1):
            v = ws.cell(row=row, column=col).value
            if v is None:
                continue
            v = str(v)
            if len(v) > max_len:
                max_len = len(v)
        ws.column_dimensions[get_column_letter(col)].width = min(max(12, max_len + 2), 55)


def _write_sheet(ws, title: str, headers: list[str], rows: list[list]):
    ws.title = title
    ws.append(headers)

    header_font = Font(bold=True)
    for i in range(1, len(headers) + 1):
        c = ws.cell(row=1, column=i)
        c.font = header_font
        c.alignment = Alignment(vertical="center")

    for r in rows:
        ws.append(r)

    ws.freeze_panes = "A2"
    _autosize_columns(ws)


def _highlight_alarms(ws, alarm_columns: list[int]):
    for row in range(2, ws.max_row + 1):
        for col in alarm_columns:
            cell = ws.cell(row=row, column=col)
            fill = ALARM_FILLS.get(cell.value)
            if fill is not None:
                cell.fill = fill


def _vehicle_rows(vehicles, now) -> list[list]:
    rows = []
    for v in vehicles:
        row = [
            v.plate,
            v.tenant.name,
            v.location.name if v.location_id else "",
            v.get_status_display(),
            v.make,
            v.model,
            v.year or "",
        ]
        for alarm in vehicle_alarms(v, now).values():
            row += [
                alarm.expiry or "",
                alarm.days if alarm.days is not None else "",
                alarm.state.value,
            ]
        rows.append(row)
    return rows


def _inspection_rows(vehicles) -> list[list]:
    qs = (
        InspectionRecord.objects
        .filter(vehicle__in=vehicles)
        .select_related("vehicle")
        .order_by("vehicle__plate", "-inspection_date")
    )
    return [
        [
            r.vehicle.plate,
            r.inspection_date,
            r.valid_until,
            r.get_outcome_display(),
            r.get_kind_display(),
            r.station,
            r.region,
            r.report_number,
            float(r.fee) if r.fee is not None else "",
            r.failure_reason,
            r.notes,
        ]
        for r in qs
    ]


def _insurance_rows(vehicles) -> list[list]:
    qs = (
        InsuranceRecord.objects
        .filter(vehicle__in=vehicles)
        .select_related("vehicle")
        .order_by("vehicle__plate", "sub_type", "-valid_until")
    )
    return [
        [
            r.vehicle.plate,
            r.get_sub_type_display(),
            r.policy_number,
            r.insurer,
            r.agency,
            r.start_date,
            r.valid_until,
            float(r.premium) if r.premium is not None else "",
            r.get_payment_status_display(),
            r.get_payment_plan_display() if r.payment_plan else "",
            r.installment_count or "",
            r.paid_on or "",
            r.notes,
        ]
        for r in qs
    ]


def _vehicles(request):
    return scoped_vehicles(request).select_related("tenant", "location").order_by("plate")


@login_required
@require_GET
def export_compliance_xlsx(request):
    vehicles = _vehicles(request)
    now = timezone.now()

    wb = Workbook()
    ws = wb.active
    _write_sheet(ws, "Vehicles", VEHICLE_HEADERS, _vehicle_rows(vehicles, now))
    _highlight_alarms(ws, [10, 13, 16])

    _write_sheet(wb.create_sheet(), "Inspections", INSPECTION_HEADERS, _inspection_rows(vehicles))
    _write_sheet(wb.create_sheet(), "Insurance", INSURANCE_HEADERS, _insurance_rows(vehicles))

    return _xlsx_response(wb, f"fleet_compliance_{timezone.localdate():%Y%m%d}.xlsx")


@login_required
@require_GET
def export_inspections_xlsx(request):
    wb = Workbook()
    _write_sheet(wb.active, "Inspections", INSPECTION_HEADERS, _inspection_rows(_vehicles(request)))
    return _xlsx_response(wb, "inspections.xlsx")


@login_required
@require_GET
def export_insurance_xlsx(request):
    wb = Workbook()
    _write_sheet(wb.active, "Insurance", INSURANCE_HEADERS, _insurance_rows(_vehicles(request)))
    return _xlsx_response(wb, "insurance.xlsx")
