from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Member:
    id: str
    display_name: str

    def to_record(self) -> dict:
        return {"id": self.id, "display_name": self.display_name}

    @classmethod
    def from_record(cls, record: dict) -> "Member":
        return cls(id=record["id"], display_name=record.get("display_name") or record["id"])


@dataclass
class Group:
    id: str
    name: str
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict) -> "Group":
        return cls(
            id=record["id"],
            name=record["name"],
            created_by=record.get("created_by"),
            created_at=datetime.fromisoformat(record["created_at"]),
        )
