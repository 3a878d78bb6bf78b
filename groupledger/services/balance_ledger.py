"""
Pairwise balance bookkeeping for a group.

The ledger stores ``BalanceKey(creditor, debtor) -> Money`` entries meaning
"debtor owes creditor this much". Amounts are always positive and a pair is
never stored in both directions: every update nets against the reverse entry
first, and entries that reach zero are dropped.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from groupledger.core.exceptions import InvalidAmount, SelfPaymentError
from groupledger.core.money import Money
from groupledger.core.utils import BalanceKey, decode_balance_key, encode_balance_key
from groupledger.models.expense import Split

logger = logging.getLogger(__name__)

Snapshot = Dict[BalanceKey, Money]


class BalanceLedger:

    def __init__(self, entries: Optional[Mapping[BalanceKey, Money]] = None):
        self._entries: Snapshot = {}
        if entries:
            self.restore(entries)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    @staticmethod
    def _transfer(entries: Snapshot, creditor: str, debtor: str, amount: Money) -> None:
        """Record that ``debtor`` owes ``creditor`` a further ``amount``."""
        if creditor == debtor or not amount.is_positive:
            return

        forward = BalanceKey(creditor, debtor)
        reverse = forward.reversed()

        existing = entries.get(reverse)
        if existing is not None:
            if existing > amount:
                entries[reverse] = existing - amount
                return
            del entries[reverse]
            amount = amount - existing

        if amount.is_positive:
            entries[forward] = entries.get(forward, Money.zero()) + amount

    def apply_expense_split(self, paid_by: str, splits: Iterable[Split]) -> None:
        """Every sharer other than the payer now owes the payer their share."""
        for split in splits:
            if split.member_id != paid_by and split.amount.is_positive:
                self._transfer(self._entries, paid_by, split.member_id, split.amount)

    def revert_expense_split(self, paid_by: str, splits: Iterable[Split]) -> None:
        for split in splits:
            if split.member_id != paid_by and split.amount.is_positive:
                self._transfer(self._entries, split.member_id, paid_by, split.amount)

    def apply_payment(self, from_member_id: str, to_member_id: str, amount) -> None:
        """
        ``from_member_id`` pays ``to_member_id``.

        The payment first reduces what the payer owes the payee; any excess
        is an overpayment, so the payee ends up owing the payer the rest.
        """
        amount = Money.of(amount)
        if not amount.is_positive:
            raise InvalidAmount(f"Payment amount must be greater than zero (got {amount})")
        if from_member_id == to_member_id:
            raise SelfPaymentError(from_member_id)
        self._transfer(self._entries, from_member_id, to_member_id, amount)

    def restore(self, snapshot: Mapping[BalanceKey, Money]) -> None:
        """
        Replace every entry with ``snapshot``.

        The snapshot is normalised first (negative values flip direction,
        opposite directions net), and the swap only happens once that
        succeeds.
        """
        entries: Snapshot = {}
        for key, amount in snapshot.items():
            key = BalanceKey(*key)
            amount = Money.of(amount)
            if amount.is_negative:
                self._transfer(entries, key.debtor, key.creditor, -amount)
            else:
                self._transfer(entries, key.creditor, key.debtor, amount)
        self._entries = entries

    def prune(self, member_ids: Iterable[str]) -> List[BalanceKey]:
        """Drop entries that mention anyone outside ``member_ids``."""
        members = set(member_ids)
        stale = [
            key for key in self._entries
            if key.creditor not in members or key.debtor not in members
        ]
        for key in stale:
            logger.warning("Removing balance entry for non-member pair %s -> %s", key.debtor, key.creditor)
            del self._entries[key]
        return stale

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        return dict(self._entries)

    def items(self) -> List[Tuple[BalanceKey, Money]]:
        return list(self._entries.items())

    def get(self, creditor: str, debtor: str) -> Money:
        return self._entries.get(BalanceKey(creditor, debtor), Money.zero())

    def balance_between(self, creditor: str, debtor: str) -> Money:
        """Signed amount ``debtor`` owes ``creditor`` (negative if it runs the other way)."""
        return self.get(creditor, debtor) - self.get(debtor, creditor)

    def net_position(self, member_id: str) -> Money:
        """What the member is owed minus what the member owes."""
        cents = 0
        for key, amount in self._entries.items():
            if key.creditor == member_id:
                cents += amount.cents
            elif key.debtor == member_id:
                cents -= amount.cents
        return Money.from_cents(cents)

    def net_positions(self, member_ids: Optional[Iterable[str]] = None) -> Dict[str, Money]:
        """
        Net position of every member.

        ``member_ids`` come first in the given order (settled members
        included as zero), followed by anyone else found in the ledger.
        """
        net: Dict[str, int] = {}
        for member_id in member_ids or ():
            net.setdefault(member_id, 0)
        for key, amount in self._entries.items():
            net[key.creditor] = net.get(key.creditor, 0) + amount.cents
            net[key.debtor] = net.get(key.debtor, 0) - amount.cents
        return {m: Money.from_cents(c) for m, c in net.items()}

    def total_volume(self) -> Money:
        return sum(self._entries.values(), Money.zero())

    def is_settled(self) -> bool:
        return not self._entries

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return BalanceKey(*key) in self._entries

    # ------------------------------------------------------------------
    # flat encoding for the key-value store
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, int]:
        return {encode_balance_key(k): v.cents for k, v in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, int]]) -> "BalanceLedger":
        return cls({
            decode_balance_key(k): Money.from_cents(v)
            for k, v in (data or {}).items()
        })


@dataclass
class LedgerDelta:
    """Pairs whose balance changed, plus the full balance set afterwards."""
    changes: Dict[BalanceKey, Tuple[Money, Money]]
    balances: Snapshot

    @classmethod
    def between(cls, before: Snapshot, after: Snapshot) -> "LedgerDelta":
        changes = {}
        for key in list(before) + [k for k in after if k not in before]:
            old = before.get(key, Money.zero())
            new = after.get(key, Money.zero())
            if old != new:
                changes[key] = (old, new)
        return cls(changes=changes, balances=dict(after))
