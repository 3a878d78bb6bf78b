from typing import List, Optional

from fastapi import APIRouter, Depends

from groupledger.core.dependencies import get_actor
from groupledger.db.store import KeyValueStore, get_store
from groupledger.schemas.balances import GroupBalanceOut, GroupSummaryOut, LedgerDeltaOut, balance_entries
from groupledger.schemas.settlements import (
    PaymentCreate,
    PaymentOut,
    PaymentRecordedOut,
    Settlement,
    SettlementPlanOut,
)
from groupledger.services.settlement_service import (
    get_group_balances,
    get_group_summary,
    get_payments,
    record_payment,
    simplify_group_debts,
)

router = APIRouter()


@router.post("/{group_id}/payments", response_model=PaymentRecordedOut, status_code=201)
async def add_payment(
    group_id: str,
    data: PaymentCreate,
    store: KeyValueStore = Depends(get_store),
    actor: Optional[str] = Depends(get_actor),
):
    payment, delta = await record_payment(store, group_id, data, created_by=actor)
    return PaymentRecordedOut(
        payment=PaymentOut.from_payment(payment),
        delta=LedgerDeltaOut.from_delta(delta),
    )


@router.get("/{group_id}/payments", response_model=List[PaymentOut])
async def list_payments(group_id: str, store: KeyValueStore = Depends(get_store)):
    return [PaymentOut.from_payment(p) for p in await get_payments(store, group_id)]


@router.get("/{group_id}/balances", response_model=GroupBalanceOut)
async def balances(group_id: str, store: KeyValueStore = Depends(get_store)):
    ledger, net = await get_group_balances(store, group_id)
    return GroupBalanceOut(
        net={m: v.to_decimal() for m, v in net.items()},
        balances=balance_entries(ledger.snapshot()),
    )


@router.post("/{group_id}/simplify", response_model=SettlementPlanOut)
async def simplify(group_id: str, store: KeyValueStore = Depends(get_store)):
    plan = await simplify_group_debts(store, group_id)
    return SettlementPlanOut(
        net={m: v.to_decimal() for m, v in plan.net_positions.items()},
        balances=balance_entries(plan.entries),
        settlements=[
            Settlement(from_member_id=debtor, to_member_id=creditor, amount=amount.to_decimal())
            for debtor, creditor, amount in plan.transfers
        ],
    )


@router.get("/{group_id}/summary", response_model=GroupSummaryOut)
async def summary(group_id: str, store: KeyValueStore = Depends(get_store)):
    return await get_group_summary(store, group_id)
