from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from groupledger.core.money import Money
from groupledger.models.group import utcnow

DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class Split:
    """One member's share of an expense, as produced by a split strategy."""
    member_id: str
    amount: Money
    percentage: Optional[Decimal] = None
    shares: Optional[Decimal] = None


@dataclass
class Expense:
    id: str
    group_id: str
    title: str
    amount: Money
    paid_by: str
    participants: List[str]
    split_type: str
    split_amounts: Dict[str, Money]
    category: str = DEFAULT_CATEGORY
    notes: str = ""
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def splits(self) -> List[Split]:
        return [Split(member_id, amount) for member_id, amount in self.split_amounts.items()]

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "title": self.title,
            "amount": self.amount.cents,
            "paid_by": self.paid_by,
            "participants": list(self.participants),
            "split_type": self.split_type,
            "split_amounts": {m: a.cents for m, a in self.split_amounts.items()},
            "category": self.category,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict) -> "Expense":
        return cls(
            id=record["id"],
            group_id=record["group_id"],
            title=record["title"],
            amount=Money.from_cents(record["amount"]),
            paid_by=record["paid_by"],
            participants=list(record["participants"]),
            split_type=record["split_type"],
            split_amounts={
                m: Money.from_cents(c) for m, c in record["split_amounts"].items()
            },
            category=record.get("category", DEFAULT_CATEGORY),
            notes=record.get("notes", ""),
            created_by=record.get("created_by"),
            created_at=datetime.fromisoformat(record["created_at"]),
        )
