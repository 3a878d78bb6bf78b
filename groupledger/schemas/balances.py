from decimal import Decimal
from typing import Dict, List, Mapping

from pydantic import BaseModel

from groupledger.core.money import Money
from groupledger.core.utils import BalanceKey
from groupledger.services.balance_ledger import LedgerDelta

class BalanceEntryOut(BaseModel):
    creditor_id: str
    debtor_id: str
    amount: Decimal

def balance_entries(snapshot: Mapping[BalanceKey, Money]) -> List[BalanceEntryOut]:
    return [
        BalanceEntryOut(creditor_id=k.creditor, debtor_id=k.debtor, amount=v.to_decimal())
        for k, v in snapshot.items()
    ]

class BalanceChangeOut(BaseModel):
    creditor_id: str
    debtor_id: str
    before: Decimal
    after: Decimal

class LedgerDeltaOut(BaseModel):
    changes: List[BalanceChangeOut]
    balances: List[BalanceEntryOut]

    @classmethod
    def from_delta(cls, delta: LedgerDelta) -> "LedgerDeltaOut":
        return cls(
            changes=[
                BalanceChangeOut(
                    creditor_id=k.creditor,
                    debtor_id=k.debtor,
                    before=old.to_decimal(),
                    after=new.to_decimal(),
                )
                for k, (old, new) in delta.changes.items()
            ],
            balances=balance_entries(delta.balances),
        )

class GroupBalanceOut(BaseModel):
    net: Dict[str, Decimal]
    balances: List[BalanceEntryOut]

class MemberSummaryOut(BaseModel):
    member_id: str
    total_paid: Decimal
    total_owed: Decimal
    payments_made: Decimal
    payments_received: Decimal
    net_balance: Decimal

class GroupSummaryOut(BaseModel):
    total_expenses: int
    total_expense_amount: Decimal
    total_payments: int
    total_payment_amount: Decimal
    outstanding_balance: Decimal
    member_summaries: List[MemberSummaryOut]
