"""
Wire Models for the Remote Ledger Service

These mirror the JSON the remote store sends and accepts.
Ids are integers on the wire; the in-memory model uses strings so
that temporary client ids can live alongside them.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from bookkeeper.models.ledger import AccountType, CategoryKind, TransactionKind


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AccountRecord(_WireModel):
    """Row of the Accounts collection."""

    id: Optional[int] = None
    name: str
    type: AccountType
    amount: Decimal = Decimal("0")

    @field_serializer("amount")
    def _amount_as_float(self, value: Decimal) -> float:
        return float(value)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude={"id"})


class CategoryRecord(_WireModel):
    """Row of the Categories collection."""

    id: Optional[int] = None
    name: str
    type: CategoryKind
    color: str = "#6b7280"

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude={"id"})


class TransactionRecord(_WireModel):
    """
    Row of the Transactions collection.

    One collection holds all four kinds; `note` carries the item name.
    """

    id: Optional[int] = None
    kind: TransactionKind
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    note: Optional[str] = None
    occurred_on: date
    completed: bool = False

    @field_serializer("amount")
    def _amount_as_float(self, value: Decimal) -> float:
        return float(value)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude={"id"})


class ListResponse(_WireModel):
    ok: bool = True
    items: list[dict] = Field(default_factory=list)


class CreateResponse(_WireModel):
    ok: bool = True
    id: int


class AckResponse(_WireModel):
    ok: bool = True
