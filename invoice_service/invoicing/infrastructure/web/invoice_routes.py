from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from invoice_service.invoicing.application.use_cases.invoice_actions import (
    INVOICES_PATH,
    InvoiceActionResult,
    InvoiceActions,
)

router = APIRouter(prefix=INVOICES_PATH, tags=["invoices"])

_FAILURE_STATUS_CODES = {
    "missing_field": 400,
    "validation_failure": 422,
    "persistence_failure": 500,
}


def _actions(request: Request) -> InvoiceActions:
    return request.app.state.invoice_actions


def _failure_response(result: InvoiceActionResult) -> JSONResponse:
    return JSONResponse(
        status_code=_FAILURE_STATUS_CODES.get(
            result.reason or "", status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content={
            "error": result.reason,
            "details": result.message,
            "fields": list(result.fields),
        },
    )


def _navigate(result: InvoiceActionResult) -> Response:
    if not result.ok:
        return _failure_response(result)
    return RedirectResponse(
        url=result.redirect_to or INVOICES_PATH,
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("")
async def list_invoices(request: Request, customer_id: str | None = None) -> list[dict[str, Any]]:
    repository = request.app.state.invoice_repository

    async def render() -> list[dict[str, Any]]:
        invoices = await repository.fetch_invoices(customer_id=customer_id)
        return [invoice.to_dict() for invoice in invoices]

    return await request.app.state.view_cache.get_or_render(
        INVOICES_PATH, customer_id or "", render
    )


@router.post("/create")
async def create_invoice(request: Request) -> Response:
    form_data = await request.form()
    result = await _actions(request).create_invoice(form_data)
    return _navigate(result)


@router.post("/{invoice_id}/edit")
async def update_invoice(invoice_id: str, request: Request) -> Response:
    form_data = await request.form()
    result = await _actions(request).update_invoice(invoice_id, form_data)
    return _navigate(result)


@router.post("/{invoice_id}/delete")
async def delete_invoice(invoice_id: str, request: Request) -> Response:
    result = await _actions(request).delete_invoice(invoice_id)
    if not result.ok:
        return _failure_response(result)
    return JSONResponse(content={"status": "deleted", "id": invoice_id})
