import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any, Mapping

from opentelemetry import trace

from invoice_service.invoicing.application.ports.invoice_repository_port import (
    InvoiceRepositoryPort,
)
from invoice_service.invoicing.application.ports.view_cache_port import ViewCachePort
from invoice_service.invoicing.application.validation.invoice_form import (
    AmountPolicy,
    parse_invoice_form,
)
from invoice_service.invoicing.domain.errors import (
    InvoiceActionError,
    InvoicePersistenceError,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

INVOICES_PATH = "/dashboard/invoices"


def _utc_today() -> date:
    return datetime.now(UTC).date()


@dataclass(frozen=True, slots=True)
class InvoiceActionResult:
    ok: bool
    invoice_id: str | None = None
    redirect_to: str | None = None
    reason: str | None = None
    message: str | None = None
    fields: tuple[str, ...] = ()

    @classmethod
    def failed(cls, error: InvoiceActionError, invoice_id: str | None = None) -> "InvoiceActionResult":
        return cls(
            ok=False,
            invoice_id=invoice_id,
            reason=error.reason,
            message=str(error),
            fields=error.fields,
        )


class InvoiceActions:
    """Create, update and delete handlers for invoice forms.

    Each handler validates, persists with one statement, revalidates the
    listing view and, for create and update, reports where to navigate.
    A validation or store failure is logged and returned as a failed result.
    In that case nothing is revalidated and no navigation happens.
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepositoryPort,
        view_cache: ViewCachePort,
        amount_policy: AmountPolicy | None = None,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._invoice_repository = invoice_repository
        self._view_cache = view_cache
        self._amount_policy = amount_policy
        self._today = today

    async def create_invoice(self, form_data: Mapping[str, Any]) -> InvoiceActionResult:
        with tracer.start_as_current_span("invoice_actions.create"):
            try:
                form = parse_invoice_form(form_data, self._amount_policy)
                invoice_id = await self._invoice_repository.create_invoice(
                    customer_id=form.customer_id,
                    amount_cents=form.amount_cents,
                    status=form.status,
                    issued_on=self._today(),
                )
            except InvoiceActionError as exc:
                self._log_failure("create", exc)
                return InvoiceActionResult.failed(exc)

            logger.info(
                "invoice_created customer_id=%s amount_cents=%s status=%s",
                form.customer_id,
                form.amount_cents,
                form.status,
                extra={"action": "create", "invoice_id": invoice_id},
            )
            await self._view_cache.revalidate_path(INVOICES_PATH)
            return InvoiceActionResult(
                ok=True, invoice_id=invoice_id, redirect_to=INVOICES_PATH
            )

    async def update_invoice(
        self, invoice_id: str, form_data: Mapping[str, Any]
    ) -> InvoiceActionResult:
        with tracer.start_as_current_span("invoice_actions.update"):
            try:
                form = parse_invoice_form(form_data, self._amount_policy)
                updated = await self._invoice_repository.update_invoice(
                    invoice_id=invoice_id,
                    customer_id=form.customer_id,
                    amount_cents=form.amount_cents,
                    status=form.status,
                )
            except InvoiceActionError as exc:
                self._log_failure("update", exc, invoice_id)
                return InvoiceActionResult.failed(exc, invoice_id)

            logger.info(
                "invoice_updated rows=%s amount_cents=%s status=%s",
                updated,
                form.amount_cents,
                form.status,
                extra={"action": "update", "invoice_id": invoice_id},
            )
            await self._view_cache.revalidate_path(INVOICES_PATH)
            return InvoiceActionResult(
                ok=True, invoice_id=invoice_id, redirect_to=INVOICES_PATH
            )

    async def delete_invoice(self, invoice_id: str) -> InvoiceActionResult:
        with tracer.start_as_current_span("invoice_actions.delete"):
            try:
                deleted = await self._invoice_repository.delete_invoice(invoice_id)
            except InvoiceActionError as exc:
                self._log_failure("delete", exc, invoice_id)
                return InvoiceActionResult.failed(exc, invoice_id)

            logger.info(
                "invoice_deleted rows=%s",
                deleted,
                extra={"action": "delete", "invoice_id": invoice_id},
            )
            await self._view_cache.revalidate_path(INVOICES_PATH)
            return InvoiceActionResult(ok=True, invoice_id=invoice_id)

    @staticmethod
    def _log_failure(
        action: str, error: InvoiceActionError, invoice_id: str | None = None
    ) -> None:
        level = logging.ERROR if isinstance(error, InvoicePersistenceError) else logging.WARNING
        logger.log(
            level,
            "invoice_%s_failed reason=%s error=%s",
            action,
            error.reason,
            str(error),
            extra={"action": action, "invoice_id": invoice_id},
        )
