from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from groupledger.models.payment import Payment
from groupledger.schemas.balances import BalanceEntryOut, LedgerDeltaOut

class Settlement(BaseModel):
    from_member_id: str
    to_member_id: str
    amount: Decimal

class SettlementPlanOut(BaseModel):
    net: Dict[str, Decimal]
    balances: List[BalanceEntryOut]
    settlements: List[Settlement]

class PaymentCreate(BaseModel):
    from_member_id: str
    to_member_id: str
    amount: Decimal
    note: str = ""

class PaymentOut(BaseModel):
    id: str
    group_id: str
    from_member_id: str
    to_member_id: str
    amount: Decimal
    note: str
    created_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentOut":
        return cls(
            id=payment.id,
            group_id=payment.group_id,
            from_member_id=payment.from_member_id,
            to_member_id=payment.to_member_id,
            amount=payment.amount.to_decimal(),
            note=payment.note,
            created_by=payment.created_by,
            created_at=payment.created_at,
        )

class PaymentRecordedOut(BaseModel):
    payment: PaymentOut
    delta: LedgerDeltaOut
