from datetime import date

import asyncpg  # type: ignore[import-untyped]

from invoice_service.invoicing.domain.entities.invoice import Invoice
from invoice_service.invoicing.domain.errors import InvoicePersistenceError

_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def _affected_rows(command_status: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1" or "DELETE 0"
    try:
        return int(command_status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class InvoiceRepositoryAsyncpg:
    def __init__(self, db_pool: asyncpg.Pool) -> None:
        self._db_pool = db_pool

    async def create_invoice(
        self, customer_id: str, amount_cents: int, status: str, issued_on: date
    ) -> str:
        query = (
            "INSERT INTO invoices (customer_id, amount, status, date) "
            "VALUES ($1, $2, $3, $4) RETURNING id"
        )
        try:
            async with self._db_pool.acquire() as connection:
                invoice_id = await connection.fetchval(
                    query, customer_id, amount_cents, status, issued_on
                )
        except _STORE_ERRORS as exc:
            raise InvoicePersistenceError(f"Failed to create invoice: {exc}") from exc
        return str(invoice_id)

    async def update_invoice(
        self, invoice_id: str, customer_id: str, amount_cents: int, status: str
    ) -> int:
        query = (
            "UPDATE invoices SET customer_id = $1, amount = $2, status = $3 "
            "WHERE id = $4"
        )
        try:
            async with self._db_pool.acquire() as connection:
                command_status = await connection.execute(
                    query, customer_id, amount_cents, status, invoice_id
                )
        except _STORE_ERRORS as exc:
            raise InvoicePersistenceError(f"Failed to update invoice: {exc}") from exc
        return _affected_rows(command_status)

    async def delete_invoice(self, invoice_id: str) -> int:
        try:
            async with self._db_pool.acquire() as connection:
                command_status = await connection.execute(
                    "DELETE FROM invoices WHERE id = $1", invoice_id
                )
        except _STORE_ERRORS as exc:
            raise InvoicePersistenceError(f"Failed to delete invoice: {exc}") from exc
        return _affected_rows(command_status)

    async def fetch_invoices(self, customer_id: str | None = None) -> list[Invoice]:
        query = "SELECT id, customer_id, amount, status, date FROM invoices"
        params: tuple[str, ...] = ()
        if customer_id:
            query += " WHERE customer_id = $1"
            params = (customer_id,)
        query += " ORDER BY date DESC"

        try:
            async with self._db_pool.acquire() as connection:
                rows = await connection.fetch(query, *params)
        except _STORE_ERRORS as exc:
            raise InvoicePersistenceError(f"Failed to fetch invoices: {exc}") from exc

        return [Invoice.from_row(row) for row in rows]
