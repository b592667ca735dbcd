"""Forms for the users domain."""

from __future__ import annotations

from django import forms


class LoginForm(forms.Form):
    email = forms.EmailField(
        error_messages={
            "required": "This field can not be empty",
            "invalid": "Invalid Email Address",
        },
    )
    password = forms.CharField(
        strip=False,
        widget=forms.PasswordInput,
        error_messages={"required": "This field can not be empty"},
    )
