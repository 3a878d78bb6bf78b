import logging
from typing import Dict, List
from uuid import uuid4

from groupledger.core.exceptions import InvalidAmount, NotGroupMemberError, SelfPaymentError
from groupledger.core.money import Money
from groupledger.db.store import KeyValueStore, group_key
from groupledger.models.payment import Payment
from groupledger.schemas.settlements import PaymentCreate
from groupledger.services.balance_ledger import BalanceLedger, LedgerDelta
from groupledger.services.debt_simplifier import SettlementPlan, simplify_ledger
from groupledger.services.expense_services import get_expenses_by_group
from groupledger.services.group_services import get_members, group_lock, load_ledger, save_ledger

logger = logging.getLogger(__name__)


async def record_payment(store: KeyValueStore, group_id: str, data: PaymentCreate, created_by=None):
    amount = Money.of(data.amount)
    if not amount.is_positive:
        raise InvalidAmount("Payment amount must be greater than zero")
    if data.from_member_id == data.to_member_id:
        raise SelfPaymentError(data.from_member_id)

    async with group_lock(store, group_id):
        member_ids = [m.id for m in await get_members(store, group_id)]
        for member_id in (data.from_member_id, data.to_member_id):
            if member_id not in member_ids:
                raise NotGroupMemberError(member_id, group_id)

        payment = Payment(
            id=uuid4().hex,
            group_id=group_id,
            from_member_id=data.from_member_id,
            to_member_id=data.to_member_id,
            amount=amount,
            note=data.note.strip(),
            created_by=created_by,
        )

        ledger = await load_ledger(store, group_id)
        before = ledger.snapshot()
        ledger.apply_payment(payment.from_member_id, payment.to_member_id, payment.amount)

        payments = await store.get(group_key(group_id, "payments"), [])
        payments.insert(0, payment.to_record())
        await store.set(group_key(group_id, "payments"), payments)
        await save_ledger(store, group_id, ledger)

    logger.info(
        "Recorded payment %s in group %s: %s -> %s %s",
        payment.id, group_id, payment.from_member_id, payment.to_member_id, payment.amount,
    )
    return payment, LedgerDelta.between(before, ledger.snapshot())


async def get_payments(store: KeyValueStore, group_id: str) -> List[Payment]:
    await get_members(store, group_id)
    records = await store.get(group_key(group_id, "payments"), [])
    return [Payment.from_record(r) for r in records]


async def get_group_balances(store: KeyValueStore, group_id: str):
    """Current ledger and every member's net position (settled members as zero)."""
    async with group_lock(store, group_id):
        member_ids = [m.id for m in await get_members(store, group_id)]
        ledger = await load_ledger(store, group_id)
    return ledger, ledger.net_positions(member_ids)


async def simplify_group_debts(store: KeyValueStore, group_id: str) -> SettlementPlan:
    """Replace the group's stored balances with a simplified settlement plan."""
    async with group_lock(store, group_id):
        member_ids = [m.id for m in await get_members(store, group_id)]
        ledger = await load_ledger(store, group_id)
        before = len(ledger)
        plan = simplify_ledger(ledger, member_ids)
        await save_ledger(store, group_id, ledger)

    logger.info("Simplified debts in group %s: %d entries -> %d", group_id, before, len(plan))
    return plan


async def get_group_summary(store: KeyValueStore, group_id: str) -> Dict:
    async with group_lock(store, group_id):
        members = await get_members(store, group_id)
        expenses = await get_expenses_by_group(store, group_id)
        payments = await get_payments(store, group_id)
        ledger: BalanceLedger = await load_ledger(store, group_id)

    totals = {
        m.id: {"total_paid": 0, "total_owed": 0, "payments_made": 0, "payments_received": 0}
        for m in members
    }

    for expense in expenses:
        if expense.paid_by in totals:
            totals[expense.paid_by]["total_paid"] += expense.amount.cents
        for member_id, share in expense.split_amounts.items():
            if member_id in totals:
                totals[member_id]["total_owed"] += share.cents

    for payment in payments:
        if payment.from_member_id in totals:
            totals[payment.from_member_id]["payments_made"] += payment.amount.cents
        if payment.to_member_id in totals:
            totals[payment.to_member_id]["payments_received"] += payment.amount.cents

    net = ledger.net_positions(totals)

    return {
        "total_expenses": len(expenses),
        "total_expense_amount": sum((e.amount for e in expenses), Money.zero()).to_decimal(),
        "total_payments": len(payments),
        "total_payment_amount": sum((p.amount for p in payments), Money.zero()).to_decimal(),
        "outstanding_balance": ledger.total_volume().to_decimal(),
        "member_summaries": [
            {
                "member_id": member_id,
                **{k: Money.from_cents(v).to_decimal() for k, v in values.items()},
                "net_balance": net[member_id].to_decimal(),
            }
            for member_id, values in totals.items()
        ],
    }
