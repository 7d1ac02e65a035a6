from django import forms
from .models import InspectionRecord

class InspectionRecordForm(forms.ModelForm):
    class Meta:
        model = InspectionRecord
        fields = [
            "vehicle",
            "inspection_date",
            "valid_until",
            "outcome",
            "kind",
            "station",
            "region",
            "report_number",
            "fee",
            "failure_reason",
            "failure_detail",
            "notes",
        ]

    def __init__(self, *args, vehicles=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["kind"].required = False

        if vehicles is not None:
            self.fields["vehicle"].queryset = vehicles.order_by("plate")

    def clean_kind(self):
        return self.cleaned_data.get("kind") or InspectionRecord.KIND_PERIODIC

    def clean(self):
        cleaned = super().clean()
        inspected = cleaned.get("inspection_date")
        valid_until = cleaned.get("valid_until")
        if inspected and valid_until and valid_until < inspected:
            self.add_error("valid_until", "Validity cannot end before the inspection date.")

        if cleaned.get("outcome") == InspectionRecord.OUTCOME_PASSED:
            cleaned["failure_reason"] = ""
            cleaned["failure_detail"] = ""
        return cleaned
