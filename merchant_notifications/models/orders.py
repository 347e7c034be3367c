"""Order documents as read from the orders collection."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class OrderStatus(str, Enum):
    """Order lifecycle states written by the ordering app."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    """Base model using camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class OrderItem(CamelModel):
    """A single line of an order."""
    name: str
    quantity: int = Field(ge=0)
    price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


class OrderRecord(CamelModel):
    """A customer order. Immutable here apart from ``status``."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    order_number: str
    table: Union[int, str]
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float
    created_at: datetime
    status: str = OrderStatus.PENDING.value
    merchant_id: Optional[str] = None
    branch_id: Optional[str] = None

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps coming out of MongoDB are UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "OrderRecord":
        """Build a record from a raw orders collection document."""
        data = {key: value for key, value in document.items() if key != "_id"}
        return cls.model_validate(data)

    def age(self, now: Optional[datetime] = None) -> timedelta:
        """Time elapsed since the order was created."""
        now = now or datetime.now(timezone.utc)
        return now - self.created_at
