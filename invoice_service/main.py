from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator

import asyncpg  # type: ignore[import-untyped]
import uvicorn
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.asyncpg import AsyncPGInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_fastapi_instrumentator import Instrumentator
import strawberry
from strawberry.fastapi import GraphQLRouter

from invoice_service.core.config import settings
from invoice_service.invoicing.application.use_cases.invoice_actions import InvoiceActions
from invoice_service.invoicing.application.validation.invoice_form import AmountPolicy
from invoice_service.invoicing.domain.entities.invoice import Invoice
from invoice_service.invoicing.infrastructure.persistence.postgres.invoice_repository_asyncpg import (
    InvoiceRepositoryAsyncpg,
)
from invoice_service.invoicing.infrastructure.web.invoice_routes import router as invoice_router
from invoice_service.shared.infrastructure.cache.view_cache import InMemoryViewCache
from invoice_service.shared.infrastructure.logging.structured_logger import configure_json_logging


@strawberry.type
class InvoiceType:
    id: str
    customer_id: str
    amount: int
    status: str
    date: date


@strawberry.type
class Query:
    @strawberry.field
    async def invoices(
        self,
        info: strawberry.Info,
        customer_id: str | None = None,
    ) -> list[InvoiceType]:
        repository = info.context["request"].app.state.invoice_repository
        invoices = await repository.fetch_invoices(customer_id=customer_id)
        return [_invoice_to_type(invoice) for invoice in invoices]


def _invoice_to_type(invoice: Invoice) -> InvoiceType:
    return InvoiceType(
        id=invoice.id,
        customer_id=invoice.customer_id,
        amount=invoice.amount,
        status=invoice.status,
        date=invoice.date,
    )


def _amount_policy() -> AmountPolicy | None:
    if settings.invoice_min_amount is None and settings.invoice_max_amount is None:
        return None
    return AmountPolicy(
        min_amount=settings.invoice_min_amount,
        max_amount=settings.invoice_max_amount,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_json_logging(settings.log_level)
    if not settings.database_url:
        raise RuntimeError("Missing required environment variable: DATABASE_URL")
    tracer_provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.otel_service_name})
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.otel_exporter_endpoint,
                insecure=True,
            )
        )
    )
    trace.set_tracer_provider(tracer_provider)
    asyncpg_instrumentor = AsyncPGInstrumentor()
    asyncpg_instrumentor.instrument()
    app.state.db_pool = await asyncpg.create_pool(settings.database_url)
    invoice_repository = InvoiceRepositoryAsyncpg(db_pool=app.state.db_pool)
    view_cache = InMemoryViewCache()
    app.state.invoice_repository = invoice_repository
    app.state.view_cache = view_cache
    app.state.invoice_actions = InvoiceActions(
        invoice_repository=invoice_repository,
        view_cache=view_cache,
        amount_policy=_amount_policy(),
    )

    try:
        yield
    finally:
        await app.state.db_pool.close()
        asyncpg_instrumentor.uninstrument()
        tracer_provider.shutdown()


app = FastAPI(title="Invoice Dashboard Service", lifespan=lifespan)
FastAPIInstrumentor.instrument_app(app)
Instrumentator().instrument(app).expose(app)
schema = strawberry.Schema(query=Query)
app.include_router(GraphQLRouter(schema), prefix="/graphql")
app.include_router(invoice_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
