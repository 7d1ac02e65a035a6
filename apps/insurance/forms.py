from django import forms
from .models import InsuranceRecord

class InsuranceRecordForm(forms.ModelForm):
    class Meta:
        model = InsuranceRecord
        fields = [
            "vehicle",
            "sub_type",
            "policy_number",
            "insurer",
            "agency",
            "start_date",
            "valid_until",
            "premium",
            "payment_status",
            "payment_plan",
            "installment_count",
            "paid_on",
            "coverage_notes",
            "notes",
        ]

    def __init__(self, *args, vehicles=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["payment_status"].required = False

        if vehicles is not None:
            self.fields["vehicle"].queryset = vehicles.order_by("plate")

    def clean_payment_status(self):
        return self.cleaned_data.get("payment_status") or InsuranceRecord.PAYMENT_UNPAID

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get("start_date")
        end = cleaned.get("valid_until")
        if start and end and end < start:
            self.add_error("valid_until", "Policy cannot end before it starts.")

        if cleaned.get("payment_plan") != InsuranceRecord.PLAN_INSTALLMENTS:
            cleaned["installment_count"] = None
        return cleaned
