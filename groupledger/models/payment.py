from dataclasses import dataclass, field
from datetime import datetime

from groupledger.core.money import Money
from groupledger.models.group import utcnow


@dataclass
class Payment:
    id: str
    group_id: str
    from_member_id: str
    to_member_id: str
    amount: Money
    note: str = ""
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "from_member_id": self.from_member_id,
            "to_member_id": self.to_member_id,
            "amount": self.amount.cents,
            "note": self.note,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict) -> "Payment":
        return cls(
            id=record["id"],
            group_id=record["group_id"],
            from_member_id=record["from_member_id"],
            to_member_id=record["to_member_id"],
            amount=Money.from_cents(record["amount"]),
            note=record.get("note", ""),
            created_by=record.get("created_by"),
            created_at=datetime.fromisoformat(record["created_at"]),
        )
