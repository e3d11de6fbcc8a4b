"""Parsing and validation of submitted invoice forms.

The form carries the mutable subset of an :class:`Invoice` (customer, amount in
major currency units, status). ``id`` and ``date`` are never accepted from the
caller.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from invoice_service.invoicing.domain.entities.invoice import InvoiceStatus
from invoice_service.invoicing.domain.errors import (
    InvoiceValidationError,
    MissingFieldError,
)

# form field name -> model attribute
FORM_FIELDS: dict[str, str] = {
    "customerId": "customer_id",
    "amount": "amount",
    "status": "status",
}


# range of the Postgres ``integer`` amount column
AMOUNT_CENTS_MIN = -(2**31)
AMOUNT_CENTS_MAX = 2**31 - 1


class InvoiceForm(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    customer_id: str = Field(min_length=1)
    amount: float = Field(allow_inf_nan=False)
    status: InvoiceStatus

    @property
    def amount_cents(self) -> int:
        return to_cents(self.amount)


@dataclass(frozen=True, slots=True)
class AmountPolicy:
    """Optional inclusive bounds on the major-unit amount."""

    min_amount: float | None = None
    max_amount: float | None = None

    def check(self, amount: float) -> None:
        if self.min_amount is not None and amount < self.min_amount:
            raise InvoiceValidationError(
                {"amount": f"must be greater than or equal to {self.min_amount}"}
            )
        if self.max_amount is not None and amount > self.max_amount:
            raise InvoiceValidationError(
                {"amount": f"must be less than or equal to {self.max_amount}"}
            )


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


def _parse_amount(raw: str) -> float:
    text = raw.strip()
    # float() accepts digit separators ("1_5"), form input must not
    if "_" in text:
        raise InvoiceValidationError({"amount": "must be a number"})
    try:
        amount = float(text)
    except ValueError as exc:
        raise InvoiceValidationError({"amount": "must be a number"}) from exc
    if not math.isfinite(amount):
        raise InvoiceValidationError({"amount": "must be a finite number"})
    cents = amount * 100
    if not math.isfinite(cents) or not AMOUNT_CENTS_MIN <= round(cents) <= AMOUNT_CENTS_MAX:
        raise InvoiceValidationError({"amount": "is out of range"})
    return amount


def _form_errors(exc: ValidationError) -> dict[str, str]:
    attribute_to_form = {attribute: name for name, attribute in FORM_FIELDS.items()}
    errors: dict[str, str] = {}
    for error in exc.errors():
        location = str(error["loc"][0]) if error["loc"] else "__root__"
        errors.setdefault(attribute_to_form.get(location, location), error["msg"])
    return errors


def parse_invoice_form(
    form_data: Mapping[str, Any], amount_policy: AmountPolicy | None = None
) -> InvoiceForm:
    """Validate raw form fields into an :class:`InvoiceForm`.

    Raises:
        MissingFieldError: a required field is absent or empty. Checked before
            any coercion.
        InvoiceValidationError: a field is present but malformed (including a
            file upload in place of text), or the amount falls outside the
            ``amount`` column range or ``amount_policy``.
    """
    raw = {name: form_data.get(name) for name in FORM_FIELDS}
    missing = [name for name, value in raw.items() if value is None or value == ""]
    if missing:
        raise MissingFieldError(missing)

    not_text = {name: "must be text" for name, value in raw.items() if not isinstance(value, str)}
    if not_text:
        raise InvoiceValidationError(not_text)

    amount = _parse_amount(raw["amount"])
    try:
        form = InvoiceForm.model_validate(
            {
                "customer_id": raw["customerId"],
                "amount": amount,
                "status": raw["status"],
            }
        )
    except ValidationError as exc:
        raise InvoiceValidationError(_form_errors(exc)) from exc

    if amount_policy is not None:
        amount_policy.check(form.amount)
    return form
