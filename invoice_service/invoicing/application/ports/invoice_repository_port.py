from datetime import date
from typing import Protocol

from invoice_service.invoicing.domain.entities.invoice import Invoice


class InvoiceRepositoryPort(Protocol):
    async def create_invoice(
        self, customer_id: str, amount_cents: int, status: str, issued_on: date
    ) -> str: ...

    async def update_invoice(
        self, invoice_id: str, customer_id: str, amount_cents: int, status: str
    ) -> int: ...

    async def delete_invoice(self, invoice_id: str) -> int: ...

    async def fetch_invoices(self, customer_id: str | None = None) -> list[Invoice]: ...
