from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from groupledger.models.group import Group, Member

class MemberIn(BaseModel):
    id: str
    display_name: Optional[str] = None

    def to_member(self) -> Member:
        return Member(id=self.id, display_name=self.display_name or self.id)

class GroupCreate(BaseModel):
    name: str
    created_by: Optional[str] = None
    members: List[MemberIn] = []

class MemberOut(BaseModel):
    id: str
    display_name: str

class GroupOut(BaseModel):
    id: str
    name: str
    created_by: Optional[str] = None
    created_at: datetime
    members: List[MemberOut]

    @classmethod
    def from_group(cls, group: Group, members: List[Member]) -> "GroupOut":
        return cls(
            id=group.id,
            name=group.name,
            created_by=group.created_by,
            created_at=group.created_at,
            members=[MemberOut(id=m.id, display_name=m.display_name) for m in members],
        )
