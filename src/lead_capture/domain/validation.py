"""Field-level checks for submitted lead forms."""

import re
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from .exceptions import FormValidationException
from .models import ContactForm, FieldError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "email": "Email",
    "company": "Company name",
    "title": "Job title",
    "phone": "Phone",
    "monthly_debt": "Monthly debt volume",
    "message": "Message",
}


class FormValidator(Protocol):
    """Turns raw form fields into a ContactForm or raises."""

    def validate(self, fields: Mapping[str, Any]) -> ContactForm:
        """Return the parsed form or raise FormValidationException."""
        ...


class ContactFormValidator:
    """Default contact form rules."""

    def __init__(
        self,
        required_fields: list[str] | None = None,
        require_consent: bool = False,
    ):
        self.required_fields = required_fields or [
            "first_name",
            "last_name",
            "email",
            "company",
        ]
        self.require_consent = require_consent

        unknown = set(self.required_fields) - set(ContactForm.model_fields)
        if unknown:
            raise ValueError(f"Unknown required fields: {sorted(unknown)}")

    def validate(self, fields: Mapping[str, Any]) -> ContactForm:
        try:
            form = ContactForm.model_validate(dict(fields))
        except ValidationError as e:
            raise FormValidationException(_field_errors_from(e)) from e

        errors = self._check(form)
        if errors:
            raise FormValidationException(errors)
        return form

    def _check(self, form: ContactForm) -> list[FieldError]:
        errors: list[FieldError] = []

        for name in self.required_fields:
            value = getattr(form, name)
            if value is None or (isinstance(value, str) and not value):
                label = FIELD_LABELS.get(name, name.replace("_", " ").capitalize())
                errors.append(FieldError(field=name, message=f"{label} is required"))

        if form.email and not EMAIL_PATTERN.match(form.email):
            errors.append(
                FieldError(field="email", message="Please enter a valid email address")
            )

        if self.require_consent and not form.consent_given:
            errors.append(
                FieldError(
                    field="consent_given",
                    message="You must consent to data processing to proceed",
                )
            )

        return errors


_NAMES_BY_ALIAS = {
    field.alias: name for name, field in ContactForm.model_fields.items() if field.alias
}


def _field_errors_from(error: ValidationError) -> list[FieldError]:
    field_errors = []
    for item in error.errors():
        parts = [str(part) for part in item["loc"]]
        if parts:
            parts[0] = _NAMES_BY_ALIAS.get(parts[0], parts[0])
        location = ".".join(parts) or "form"
        if item["type"] == "extra_forbidden":
            message = "Unknown field"
        else:
            message = item["msg"]
        field_errors.append(FieldError(field=location, message=message))
    return field_errors
