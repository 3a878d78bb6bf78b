from typing import List, Optional

from fastapi import APIRouter, Depends

from groupledger.core.dependencies import get_actor
from groupledger.db.store import KeyValueStore, get_store
from groupledger.schemas.balances import LedgerDeltaOut
from groupledger.schemas.expense import (
    ExpenseCreate,
    ExpenseOut,
    ExpenseRecordedOut,
    SplitOut,
    SplitRequest,
)
from groupledger.services.expense_services import (
    build_strategy_params,
    delete_expense,
    get_expenses_by_group,
    record_expense,
    split_expense,
)

router = APIRouter()

@router.post("/split", response_model=List[SplitOut])
async def preview_split(data: SplitRequest):
    params = build_strategy_params(data.strategy, data.split_params, data.items)
    splits = split_expense(data.amount, data.members, data.strategy, params)
    return [SplitOut.from_split(s) for s in splits]

@router.post("/{group_id}/add", response_model=ExpenseRecordedOut, status_code=201)
async def add_expense(
    group_id: str,
    data: ExpenseCreate,
    store: KeyValueStore = Depends(get_store),
    actor: Optional[str] = Depends(get_actor),
):
    expense, delta = await record_expense(store, group_id, data, created_by=actor)
    return ExpenseRecordedOut(
        expense=ExpenseOut.from_expense(expense),
        delta=LedgerDeltaOut.from_delta(delta),
    )

@router.get("/{group_id}/all", response_model=List[ExpenseOut])
async def all_expenses(group_id: str, store: KeyValueStore = Depends(get_store)):
    return [ExpenseOut.from_expense(e) for e in await get_expenses_by_group(store, group_id)]

@router.delete("/{group_id}/{expense_id}", response_model=ExpenseRecordedOut)
async def del_expense(group_id: str, expense_id: str, store: KeyValueStore = Depends(get_store)):
    expense, delta = await delete_expense(store, group_id, expense_id)
    return ExpenseRecordedOut(
        expense=ExpenseOut.from_expense(expense),
        delta=LedgerDeltaOut.from_delta(delta),
    )
