import logging
from typing import List, Optional, Sequence
from uuid import uuid4

from groupledger.core.config import settings
from groupledger.core.exceptions import ExpenseNotFoundError, NotGroupMemberError
from groupledger.core.money import Money
from groupledger.db.store import KeyValueStore, group_key
from groupledger.models.expense import DEFAULT_CATEGORY, Expense, Split
from groupledger.schemas.expense import ExpenseCreate, ItemizedEntryIn
from groupledger.services.balance_ledger import LedgerDelta
from groupledger.services.expense_splitter import ExpenseSplitter
from groupledger.services.group_services import get_members, group_lock, load_ledger, save_ledger
from groupledger.services.split_strategies import ItemizedEntry, SplitType, get_split_strategy

logger = logging.getLogger(__name__)


def build_strategy_params(strategy_name=None, split_params=None, items: Optional[List[ItemizedEntryIn]] = None):
    """Per-strategy parameters from request fields: item list for itemized, member map otherwise."""
    strategy_name = strategy_name or settings.DEFAULT_SPLIT_STRATEGY
    if get_split_strategy(strategy_name).split_type == SplitType.ITEMIZED:
        return [
            ItemizedEntry(amount=Money.of(i.amount), selected_by=i.selected_by, name=i.name)
            for i in (items or [])
        ]
    return split_params


def split_expense(total, members: Sequence[str], strategy_name=None, strategy_params=None) -> List[Split]:
    """
    Split ``total`` across ``members`` with the named strategy.

    Pure: raises a ``SplitValidationError`` subclass on bad input and never
    touches a ledger.
    """
    splitter = ExpenseSplitter(strategy_name or settings.DEFAULT_SPLIT_STRATEGY)
    return splitter.split(total, members, strategy_params)


async def get_expenses_by_group(store: KeyValueStore, group_id: str) -> List[Expense]:
    await get_members(store, group_id)
    records = await store.get(group_key(group_id, "expenses"), [])
    return [Expense.from_record(r) for r in records]


async def record_expense(store: KeyValueStore, group_id: str, data: ExpenseCreate, created_by=None):
    """
    Split an expense and fold the shares into the group's balances.

    The split is fully validated before the ledger is read, so a rejected
    expense changes nothing.
    """
    async with group_lock(store, group_id):
        members = await get_members(store, group_id)
        member_ids = [m.id for m in members]

        if data.paid_by not in member_ids:
            raise NotGroupMemberError(data.paid_by, group_id)

        participants = list(data.participants) if data.participants else member_ids
        for member_id in participants:
            if member_id not in member_ids:
                raise NotGroupMemberError(member_id, group_id)

        strategy_name = data.strategy or settings.DEFAULT_SPLIT_STRATEGY
        params = build_strategy_params(strategy_name, data.split_params, data.items)
        splits = split_expense(data.amount, participants, strategy_name, params)

        expense = Expense(
            id=uuid4().hex,
            group_id=group_id,
            title=data.title,
            amount=Money.of(data.amount),
            paid_by=data.paid_by,
            participants=participants,
            split_type=get_split_strategy(strategy_name).name,
            split_amounts={s.member_id: s.amount for s in splits},
            category=data.category or DEFAULT_CATEGORY,
            notes=data.notes.strip(),
            created_by=created_by,
        )

        ledger = await load_ledger(store, group_id)
        before = ledger.snapshot()
        ledger.apply_expense_split(expense.paid_by, splits)

        expenses = await store.get(group_key(group_id, "expenses"), [])
        expenses.insert(0, expense.to_record())
        await store.set(group_key(group_id, "expenses"), expenses)
        await save_ledger(store, group_id, ledger)

    delta = LedgerDelta.between(before, ledger.snapshot())
    logger.info(
        "Recorded expense %s in group %s: %s paid by %s (%s split)",
        expense.id, group_id, expense.amount, expense.paid_by, expense.split_type,
    )
    logger.debug("Expense %s changed %d balance pairs", expense.id, len(delta.changes))
    return expense, delta


async def delete_expense(store: KeyValueStore, group_id: str, expense_id: str):
    """Remove an expense and reverse its effect on the group's balances."""
    async with group_lock(store, group_id):
        member_ids = [m.id for m in await get_members(store, group_id)]
        records = await store.get(group_key(group_id, "expenses"), [])

        match = next((r for r in records if r["id"] == expense_id), None)
        if match is None:
            raise ExpenseNotFoundError(expense_id)
        expense = Expense.from_record(match)
        # every member the expense touches must still be in the group
        for member_id in [expense.paid_by, *expense.split_amounts]:
            if member_id not in member_ids:
                raise NotGroupMemberError(member_id, group_id)

        ledger = await load_ledger(store, group_id)
        before = ledger.snapshot()
        ledger.revert_expense_split(expense.paid_by, expense.splits())

        await store.set(
            group_key(group_id, "expenses"),
            [r for r in records if r["id"] != expense_id],
        )
        await save_ledger(store, group_id, ledger)

    logger.info("Deleted expense %s from group %s", expense_id, group_id)
    return expense, LedgerDelta.between(before, ledger.snapshot())
