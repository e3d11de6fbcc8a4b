from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

from invoice_service.invoicing.domain.entities.invoice import Invoice
from invoice_service.invoicing.domain.errors import InvoicePersistenceError


class InMemoryInvoiceStore:
    """Repository double with the same no-op semantics as the SQL statements."""

    def __init__(self, events: list[str] | None = None, fail_with: str | None = None) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.events = events if events is not None else []
        self.fail_with = fail_with
        self.fetch_calls = 0
        self._next_id = 1

    def seed(self, invoice_id: str, customer_id: str, amount: int, status: str, issued_on: date) -> None:
        self.rows[invoice_id] = {
            "id": invoice_id,
            "customer_id": customer_id,
            "amount": amount,
            "status": status,
            "date": issued_on,
        }

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise InvoicePersistenceError(self.fail_with)

    async def create_invoice(
        self, customer_id: str, amount_cents: int, status: str, issued_on: date
    ) -> str:
        self._check_failure()
        invoice_id = f"generated-{self._next_id}"
        self._next_id += 1
        self.seed(invoice_id, customer_id, amount_cents, status, issued_on)
        self.events.append("persist")
        return invoice_id

    async def update_invoice(
        self, invoice_id: str, customer_id: str, amount_cents: int, status: str
    ) -> int:
        self._check_failure()
        self.events.append("persist")
        row = self.rows.get(invoice_id)
        if row is None:
            return 0
        row.update(customer_id=customer_id, amount=amount_cents, status=status)
        return 1

    async def delete_invoice(self, invoice_id: str) -> int:
        self._check_failure()
        self.events.append("persist")
        return 1 if self.rows.pop(invoice_id, None) is not None else 0

    async def fetch_invoices(self, customer_id: str | None = None) -> list[Invoice]:
        self.fetch_calls += 1
        return [
            Invoice.from_row(row)
            for row in self.rows.values()
            if not customer_id or row["customer_id"] == customer_id
        ]


class RecordingViewCache:
    def __init__(self, events: list[str] | None = None) -> None:
        self.revalidated: list[str] = []
        self.events = events if events is not None else []

    async def get_or_render(
        self, path: str, variant: str, render: Callable[[], Awaitable[Any]]
    ) -> Any:
        return await render()

    async def revalidate_path(self, path: str) -> None:
        self.revalidated.append(path)
        self.events.append("revalidate")
