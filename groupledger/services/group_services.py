import logging
from contextlib import asynccontextmanager
from typing import List
from uuid import uuid4

from groupledger.core.config import settings
from groupledger.core.exceptions import (
    DuplicateMemberError,
    GroupNotFoundError,
    GroupFullError,
    NotGroupMemberError,
    OutstandingBalanceError,
)
from groupledger.db.store import KeyValueStore, group_key
from groupledger.models.group import Group, Member
from groupledger.schemas.group import GroupCreate
from groupledger.services.balance_ledger import BalanceLedger

logger = logging.getLogger(__name__)


async def create_group(store: KeyValueStore, data: GroupCreate):
    members: List[Member] = []
    for m in data.members:
        member = m.to_member()
        if any(existing.id == member.id for existing in members):
            raise DuplicateMemberError(member.id)
        members.append(member)

    if data.created_by and all(m.id != data.created_by for m in members):
        members.insert(0, Member(id=data.created_by, display_name=data.created_by))

    if len(members) > settings.MAX_GROUP_MEMBERS:
        raise GroupFullError(settings.MAX_GROUP_MEMBERS)

    group = Group(id=uuid4().hex, name=data.name, created_by=data.created_by)

    await store.set(group_key(group.id), group.to_record())
    await store.set(group_key(group.id, "members"), [m.to_record() for m in members])
    await store.set(group_key(group.id, "expenses"), [])
    await store.set(group_key(group.id, "payments"), [])
    await store.set(group_key(group.id, "balances"), {})

    logger.info("Created group %s with %d members", group.id, len(members))
    return group, members


async def get_group(store: KeyValueStore, group_id: str) -> Group:
    record = await store.get(group_key(group_id))
    if record is None:
        raise GroupNotFoundError(group_id)
    return Group.from_record(record)


@asynccontextmanager
async def group_lock(store: KeyValueStore, group_id: str):
    """Hold the group's lock. Unknown groups raise before any lock is created."""
    await get_group(store, group_id)
    async with store.lock(group_id):
        yield


async def get_members(store: KeyValueStore, group_id: str) -> List[Member]:
    await get_group(store, group_id)
    records = await store.get(group_key(group_id, "members"), [])
    return [Member.from_record(r) for r in records]


async def add_member(store: KeyValueStore, group_id: str, member: Member) -> Member:
    async with group_lock(store, group_id):
        members = await get_members(store, group_id)

        if any(m.id == member.id for m in members):
            raise DuplicateMemberError(member.id)
        if len(members) >= settings.MAX_GROUP_MEMBERS:
            raise GroupFullError(settings.MAX_GROUP_MEMBERS)

        members.append(member)
        await store.set(group_key(group_id, "members"), [m.to_record() for m in members])

    logger.info("Added member %s to group %s", member.id, group_id)
    return member


async def remove_member(store: KeyValueStore, group_id: str, member_id: str) -> None:
    """
    Remove a member from a group.

    A member still named in any balance entry cannot leave; their debts
    have to be settled first.
    """
    async with group_lock(store, group_id):
        members = await get_members(store, group_id)
        remaining = [m for m in members if m.id != member_id]
        if len(remaining) == len(members):
            raise NotGroupMemberError(member_id, group_id)

        ledger = await load_ledger(store, group_id)
        if any(member_id in key for key in ledger.snapshot()):
            raise OutstandingBalanceError(member_id, ledger.net_position(member_id))

        await store.set(group_key(group_id, "members"), [m.to_record() for m in remaining])

    logger.info("Removed member %s from group %s", member_id, group_id)


async def load_ledger(store: KeyValueStore, group_id: str) -> BalanceLedger:
    """
    Read a group's ledger, leaving out entries for members no longer in the group.

    Never writes. Callers that mutate the ledger must hold
    ``group_lock(store, group_id)`` and persist it with ``save_ledger``.
    """
    members = await get_members(store, group_id)
    ledger = BalanceLedger.from_dict(await store.get(group_key(group_id, "balances"), {}))
    ledger.prune(m.id for m in members)
    return ledger


async def save_ledger(store: KeyValueStore, group_id: str, ledger: BalanceLedger) -> None:
    await store.set(group_key(group_id, "balances"), ledger.to_dict())


async def list_groups(store: KeyValueStore) -> List[Group]:
    rows = await store.scan("group:")
    # group records are the only keys without a sub-key suffix
    return [Group.from_record(value) for key, value in rows if key.count(":") == 1]
