"""Forms for the public booking flow and the dashboard."""

from __future__ import annotations

from django import forms  # type: ignore

from shared.domain.value_objects import DATE_FORMAT

REQUIRED_MESSAGE = "This field can not be empty"
MIN_LENGTH_MESSAGE = "This field must be at least %(limit_value)d characters long"
INVALID_EMAIL_MESSAGE = "Invalid Email Address"
INVERTED_DATES_MESSAGE = "Arrival must not be after departure"


def _text(required: bool = True, min_length: int | None = None) -> forms.CharField:
    return forms.CharField(
        required=required,
        min_length=min_length,
        max_length=255,
        error_messages={"required": REQUIRED_MESSAGE, "min_length": MIN_LENGTH_MESSAGE},
    )


def _email() -> forms.EmailField:
    return forms.EmailField(
        max_length=255,
        error_messages={"required": REQUIRED_MESSAGE, "invalid": INVALID_EMAIL_MESSAGE},
    )


class GuestDetailsForm(forms.Form):
    """Guest name and contact fields.

    Field names are hyphenated to match the posted form (``first-name``), so
    they are declared in ``__init__`` rather than as class attributes.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["first-name"] = _text(min_length=3)
        self.fields["last-name"] = _text()
        self.fields["email"] = _email()
        self.fields["phone"] = _text(required=False)

    def guest_details(self) -> dict:
        data = self.cleaned_data
        return {
            "first_name": data["first-name"],
            "last_name": data["last-name"],
            "email": data["email"],
            "phone": data.get("phone", ""),
        }


class ReservationForm(GuestDetailsForm):
    """Guest details plus the stay: ``start-date``, ``end-date``, ``room-id``."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        date_errors = {"required": REQUIRED_MESSAGE, "invalid": "Enter a date as YYYY-MM-DD"}
        self.fields["start-date"] = forms.DateField(input_formats=[DATE_FORMAT], error_messages=date_errors)
        self.fields["end-date"] = forms.DateField(input_formats=[DATE_FORMAT], error_messages=date_errors)
        self.fields["room-id"] = forms.IntegerField(min_value=1, error_messages={"required": REQUIRED_MESSAGE})

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("start-date"), cleaned.get("end-date")
        if start and end and end < start:
            self.add_error("end-date", "Departure must not be before arrival")
        return cleaned


class AvailabilityForm(forms.Form):
    """Arrival/departure search form (``start`` and ``end``)."""

    start = forms.DateField(input_formats=[DATE_FORMAT], error_messages={"invalid": "can't parse start date"})
    end = forms.DateField(input_formats=[DATE_FORMAT], error_messages={"invalid": "can't parse end date"})

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get("start"), cleaned.get("end")
        if start and end and start > end:
            raise forms.ValidationError(INVERTED_DATES_MESSAGE, code="inverted")
        return cleaned

    def has_unparsable_dates(self) -> bool:
        return "start" in self.errors or "end" in self.errors
