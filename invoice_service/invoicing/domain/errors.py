from typing import ClassVar, Mapping


class InvoiceActionError(Exception):
    """Base class for failures an invoice action reports instead of raising."""

    reason: ClassVar[str] = "invoice_action_error"

    @property
    def fields(self) -> tuple[str, ...]:
        return ()


class MissingFieldError(InvoiceActionError):
    reason = "missing_field"

    def __init__(self, missing: list[str]) -> None:
        super().__init__("Missing required form fields: " + ", ".join(missing))
        self._missing = tuple(missing)

    @property
    def fields(self) -> tuple[str, ...]:
        return self._missing


class InvoiceValidationError(InvoiceActionError):
    reason = "validation_failure"

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Invalid invoice fields: {details}")

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.errors)


class InvoicePersistenceError(InvoiceActionError):
    reason = "persistence_failure"
