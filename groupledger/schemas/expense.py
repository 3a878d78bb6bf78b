from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from groupledger.models.expense import Expense, Split
from groupledger.schemas.balances import LedgerDeltaOut

class ItemizedEntryIn(BaseModel):
    name: str = ""
    amount: Decimal
    selected_by: List[str]

class SplitRequest(BaseModel):
    amount: Decimal
    members: List[str]
    strategy: Optional[str] = None
    split_params: Optional[Dict[str, Decimal]] = None
    items: Optional[List[ItemizedEntryIn]] = None

class ExpenseCreate(BaseModel):
    title: str
    amount: Decimal
    paid_by: str
    # defaults to every group member
    participants: Optional[List[str]] = None
    strategy: Optional[str] = None
    split_params: Optional[Dict[str, Decimal]] = None
    items: Optional[List[ItemizedEntryIn]] = None
    category: Optional[str] = None
    notes: str = ""

class SplitOut(BaseModel):
    member_id: str
    amount: Decimal
    percentage: Optional[Decimal] = None
    shares: Optional[Decimal] = None

    @classmethod
    def from_split(cls, split: Split) -> "SplitOut":
        return cls(
            member_id=split.member_id,
            amount=split.amount.to_decimal(),
            percentage=split.percentage,
            shares=split.shares,
        )

class ExpenseOut(BaseModel):
    id: str
    group_id: str
    title: str
    amount: Decimal
    paid_by: str
    participants: List[str]
    split_type: str
    splits: List[SplitOut]
    category: str
    notes: str
    created_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseOut":
        return cls(
            id=expense.id,
            group_id=expense.group_id,
            title=expense.title,
            amount=expense.amount.to_decimal(),
            paid_by=expense.paid_by,
            participants=expense.participants,
            split_type=expense.split_type,
            splits=[SplitOut.from_split(s) for s in expense.splits()],
            category=expense.category,
            notes=expense.notes,
            created_by=expense.created_by,
            created_at=expense.created_at,
        )

class ExpenseRecordedOut(BaseModel):
    expense: ExpenseOut
    delta: LedgerDeltaOut
