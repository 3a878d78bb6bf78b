"""
Debt simplification.

Collapses a group's pairwise balances into a smaller set of entries that
leaves every member's net position unchanged. Greedy matching of the largest
creditor with the largest debtor yields at most ``k - 1`` entries for ``k``
members with a non-zero position.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from groupledger.core.money import Money
from groupledger.core.utils import BalanceKey
from groupledger.services.balance_ledger import BalanceLedger

logger = logging.getLogger(__name__)


@dataclass
class SettlementPlan:
    entries: Dict[BalanceKey, Money] = field(default_factory=dict)
    # member net positions the plan preserves, settled members included as zero
    net_positions: Dict[str, Money] = field(default_factory=dict)

    @property
    def transfers(self) -> List[Tuple[str, str, Money]]:
        """(debtor, creditor, amount) for each payment that settles the group."""
        return [(k.debtor, k.creditor, v) for k, v in self.entries.items()]

    def total_volume(self) -> Money:
        return sum(self.entries.values(), Money.zero())

    def to_ledger(self) -> BalanceLedger:
        return BalanceLedger(self.entries)

    def __len__(self):
        return len(self.entries)


def simplify_debts(
    source: Union[BalanceLedger, Mapping[BalanceKey, Money]],
    member_ids: Optional[Iterable[str]] = None,
) -> SettlementPlan:
    """
    Greedy algorithm to minimize the number of balance entries.

    Pure: ``source`` is not modified. Ties keep member order (``member_ids``
    first, then order of appearance in the ledger).
    """
    ledger = source if isinstance(source, BalanceLedger) else BalanceLedger(source)
    net_map = ledger.net_positions(member_ids)

    creditors = []
    debtors = []

    for uid, bal in net_map.items():
        if bal.is_positive:
            creditors.append([uid, bal.cents])
        elif bal.is_negative:
            debtors.append([uid, bal.cents])

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1])

    creditors = deque(creditors)
    debtors = deque(debtors)

    entries: Dict[BalanceKey, Money] = {}

    while creditors and debtors:
        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        settle_amt = min(cred_amt, -debt_amt)
        entries[BalanceKey(cred_id, debt_id)] = Money.from_cents(settle_amt)

        creditors[0][1] -= settle_amt
        debtors[0][1] += settle_amt

        if creditors[0][1] == 0:
            creditors.popleft()
        if debtors[0][1] == 0:
            debtors.popleft()

    return SettlementPlan(entries, net_map)


def simplify_ledger(ledger: BalanceLedger, member_ids: Optional[Iterable[str]] = None) -> SettlementPlan:
    """Simplify ``ledger`` in place, replacing its entries with the plan."""
    before = len(ledger)
    plan = simplify_debts(ledger, member_ids)
    ledger.restore(plan.entries)
    logger.debug("Simplified %d balance entries down to %d", before, len(plan))
    return plan
