from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import uuid4

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from finance_tracker.models.category import CamelModel, Category

CENTS = Decimal("0.01")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_amount(value: Any) -> str:
    """Validate a money amount and return it as exact two-decimal text."""
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("amount must be a number")
    if not amount.is_finite():
        raise ValueError("amount must be finite")
    if amount < 0:
        raise ValueError("amount must not be negative")
    try:
        return str(amount.quantize(CENTS))
    except InvalidOperation:
        raise ValueError("amount is too large")


class ExpenseCreate(CamelModel):
    amount: str
    description: str = Field(default="", max_length=500)
    category_id: str = Field(min_length=1)
    date: datetime = Field(default_factory=_utcnow)

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value: Any) -> str:
        return normalize_amount(value)


class ExpenseUpdate(CamelModel):
    amount: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return normalize_amount(value)


class ExpenseInDB(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    amount: str
    description: str = ""
    category_id: str
    date: datetime
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ExpenseWithCategory(ExpenseInDB):
    category: Optional[Category] = None


class ExpenseRecord(CamelModel):
    """Read-only row handed to the analytics engine.

    ``amount`` stays raw text: rows written before validation existed may hold
    values that do not parse, and the engine decides what to do with them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    amount: str
    date: datetime
    category_id: str
    category: Optional[Category] = None
    description: str = ""
