from django import forms
from .models import Vehicle

class VehicleForm(forms.ModelForm):
    class Meta:
        model = Vehicle
        fields = [
            "plate", "location",
            "year", "make", "model",
            "status", "inspection_tracked", "insurance_tracked",
            "notes",
        ]

    def __init__(self, *args, tenant=None, **kwargs):
        super().__init__(*args, **kwargs)
        if tenant is not None:
            self.fields["location"].queryset = (
                self.fields["location"].queryset
                .filter(tenant=tenant)
                .order_by("name")
            )

    def clean_plate(self):
        plate = (self.cleaned_data.get("plate") or "").replace(" ", "").upper()
        if not plate:
            raise forms.ValidationError("Plate is required.")
        qs = Vehicle.objects.filter(plate=plate)
        if self.instance.pk:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise forms.ValidationError("A vehicle with this plate already exists.")
        return plate
