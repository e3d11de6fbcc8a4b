from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Mapping

InvoiceStatus = Literal["pending", "paid"]


@dataclass(frozen=True, slots=True)
class Invoice:
    """A persisted invoice row. ``amount`` is stored in cents."""

    id: str
    customer_id: str
    amount: int
    status: str
    date: date

    @staticmethod
    def _parse_date(value: Any) -> date:
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Invoice":
        return cls(
            id=str(row["id"]),
            customer_id=str(row["customer_id"]),
            amount=int(row["amount"]),
            status=str(row["status"]),
            date=cls._parse_date(row["date"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "amount": self.amount,
            "status": self.status,
            "date": self.date.isoformat(),
        }
