"""
Split strategies.

Each strategy turns (total, participants, parameters) into one ``Split`` per
participant. Every strategy works on integer cents, so the resulting amounts
always add up to the total exactly.

Strategies are pure: they never touch ledger state.

The set of strategies is closed; ``get_split_strategy`` is the single place
that maps a ``SplitType`` to its implementation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from groupledger.core.exceptions import (
    CustomAmountSumMismatch,
    InvalidAmount,
    MissingStrategyParameter,
    ParticipantSetEmpty,
    PercentageSumMismatch,
    SplitValidationError,
    UnknownParticipant,
    UnknownStrategy,
)
from groupledger.core.money import Money
from groupledger.core.utils import qround, round_half_up
from groupledger.models.expense import Split

PERCENTAGE_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")


class SplitType(str, Enum):
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"
    SHARES = "shares"
    ITEMIZED = "itemized"
    DURATION = "duration"


@dataclass(frozen=True)
class ItemizedEntry:
    """A line item ordered jointly by ``selected_by``."""
    amount: Money
    selected_by: Sequence[str]
    name: str = ""


def _to_decimal(value, member_id, parameter) -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid {parameter} for member {member_id}: {value!r}")
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid {parameter} for member {member_id}: {value!r}")
    if not dec.is_finite():
        raise InvalidAmount(f"Invalid {parameter} for member {member_id}: {value!r}")
    return dec


def distribute_evenly(total_cents: int, count: int) -> List[int]:
    """
    Split ``total_cents`` into ``count`` parts differing by at most one cent.

    The leftover cents go one each to the leading parts.
    """
    base, remainder = divmod(total_cents, count)
    return [base + 1 if i < remainder else base for i in range(count)]


def fold_rounding_error(cents: List[int], total_cents: int) -> List[int]:
    """
    Make rounded ``cents`` add up to ``total_cents``.

    A shortfall goes to the first part. An excess is taken back from the
    parts in order, never leaving a part below zero.
    """
    diff = total_cents - sum(cents)
    if diff >= 0:
        cents[0] += diff
        return cents
    excess = -diff
    for i, part in enumerate(cents):
        take = min(part, excess)
        cents[i] -= take
        excess -= take
        if not excess:
            break
    return cents


def allocate_by_weight(total: Money, weights: Sequence[Decimal]) -> List[int]:
    """
    Allocate ``total`` proportionally to ``weights``.

    Each part is rounded half-up to the cent; the rounding error is folded
    in with ``fold_rounding_error``.
    """
    weight_sum = sum(weights, Decimal("0"))
    cents = [round_half_up(Decimal(total.cents) * w / weight_sum) for w in weights]
    return fold_rounding_error(cents, total.cents)


class BaseSplitStrategy(ABC):
    """Base class for split strategies."""

    split_type: SplitType

    @property
    def name(self) -> str:
        return self.split_type.value

    def validate(self, total: Money, members: Sequence[str], params=None) -> None:
        if not isinstance(total, Money):
            total = Money.of(total)
        if not total.is_positive:
            raise InvalidAmount(f"Amount must be positive (got {total})")
        if not members:
            raise ParticipantSetEmpty()
        if len(set(members)) != len(members):
            raise SplitValidationError("Duplicate members found in split")

    def calculate(self, total: Money, members: Sequence[str], params=None) -> List[Split]:
        total = Money.of(total)
        members = list(members)
        self.validate(total, members, params)
        return self._calculate(total, members, params)

    @abstractmethod
    def _calculate(self, total: Money, members: List[str], params) -> List[Split]:
        """Compute splits for already-validated inputs."""


class EqualSplitStrategy(BaseSplitStrategy):
    split_type = SplitType.EQUAL

    def _calculate(self, total, members, params):
        parts = distribute_evenly(total.cents, len(members))
        return [Split(m, Money.from_cents(c)) for m, c in zip(members, parts)]


def _lookup(params: Optional[Mapping], member_id: str, parameter: str):
    if not params or params.get(member_id) is None:
        raise MissingStrategyParameter(member_id, parameter)
    return params[member_id]


class PercentageSplitStrategy(BaseSplitStrategy):
    split_type = SplitType.PERCENTAGE

    def _percentages(self, members, params) -> Dict[str, Decimal]:
        percentages = {}
        for member_id in members:
            pct = _to_decimal(_lookup(params, member_id, "percentage"), member_id, "percentage")
            if pct < 0:
                raise InvalidAmount(f"Percentage must not be negative for member {member_id}")
            percentages[member_id] = pct
        return percentages

    def validate(self, total, members, params=None):
        super().validate(total, members, params)
        percentages = self._percentages(members, params)
        actual = sum(percentages.values(), Decimal("0"))
        if abs(actual - HUNDRED) > PERCENTAGE_TOLERANCE:
            raise PercentageSumMismatch(actual=actual, expected=HUNDRED)

    def _calculate(self, total, members, params):
        percentages = self._percentages(members, params)
        cents = fold_rounding_error(
            [round_half_up(Decimal(total.cents) * percentages[m] / HUNDRED) for m in members],
            total.cents,
        )
        return [
            Split(m, Money.from_cents(c), percentage=percentages[m])
            for m, c in zip(members, cents)
        ]


class CustomSplitStrategy(BaseSplitStrategy):
    split_type = SplitType.CUSTOM

    def _amounts(self, members, params) -> Dict[str, Money]:
        amounts = {}
        for member_id in members:
            dec = _to_decimal(_lookup(params, member_id, "amount"), member_id, "amount")
            if dec < 0:
                raise InvalidAmount(f"Amount must not be negative for member {member_id}")
            if dec != qround(dec):
                raise InvalidAmount(f"Amount for member {member_id} has more than two decimal places: {dec}")
            amounts[member_id] = Money.of(dec)
        return amounts

    def validate(self, total, members, params=None):
        super().validate(total, members, params)
        total = Money.of(total)
        given = sum(self._amounts(members, params).values(), Money.zero())
        if given != total:
            raise CustomAmountSumMismatch(actual=given, expected=total)

    def _calculate(self, total, members, params):
        amounts = self._amounts(members, params)
        return [Split(m, amounts[m]) for m in members]


class ShareSplitStrategy(BaseSplitStrategy):
    """Weighted split: ``amount = total * shares / sum(shares)``."""

    split_type = SplitType.SHARES
    parameter = "shares"

    def _shares(self, members, params) -> Dict[str, Decimal]:
        shares = {}
        for member_id in members:
            count = _to_decimal(_lookup(params, member_id, self.parameter), member_id, self.parameter)
            if count <= 0:
                raise InvalidAmount(f"{self.parameter.capitalize()} must be positive for {member_id}")
            shares[member_id] = count
        return shares

    def validate(self, total, members, params=None):
        super().validate(total, members, params)
        self._shares(members, params)

    def _calculate(self, total, members, params):
        shares = self._shares(members, params)
        cents = allocate_by_weight(total, [shares[m] for m in members])
        return [
            Split(m, Money.from_cents(c), shares=shares[m])
            for m, c in zip(members, cents)
        ]


class DurationSplitStrategy(ShareSplitStrategy):
    """Shares split where each member's weight is the days or hours they took part."""

    split_type = SplitType.DURATION
    parameter = "duration"


def _as_item(raw) -> ItemizedEntry:
    if isinstance(raw, ItemizedEntry):
        return raw
    return ItemizedEntry(
        amount=Money.of(raw.get("amount")),
        selected_by=list(raw.get("selected_by") or []),
        name=raw.get("name", ""),
    )


class ItemizedSplitStrategy(BaseSplitStrategy):
    """
    Each item is shared evenly by the members who selected it.

    A member owes the sum of their item portions; members who selected
    nothing owe zero.
    """

    split_type = SplitType.ITEMIZED

    def validate(self, total, members, params=None):
        super().validate(total, members, params)
        total = Money.of(total)
        items = [_as_item(raw) for raw in (params or [])]
        known = set(members)
        for item in items:
            if not item.amount.is_positive:
                raise InvalidAmount(f"Item amount must be positive (got {item.amount})")
            if not item.selected_by:
                raise ParticipantSetEmpty(f"Item {item.name or item.amount} has no members")
            for member_id in item.selected_by:
                if member_id not in known:
                    raise UnknownParticipant(member_id)
        given = sum((item.amount for item in items), Money.zero())
        if given != total:
            raise CustomAmountSumMismatch(actual=given, expected=total)

    def _calculate(self, total, members, params):
        owed = {m: 0 for m in members}
        for item in (_as_item(raw) for raw in params):
            selectors = list(dict.fromkeys(item.selected_by))
            for member_id, cents in zip(selectors, distribute_evenly(item.amount.cents, len(selectors))):
                owed[member_id] += cents
        return [Split(m, Money.from_cents(owed[m])) for m in members]


_STRATEGIES = {
    SplitType.EQUAL: EqualSplitStrategy,
    SplitType.PERCENTAGE: PercentageSplitStrategy,
    SplitType.CUSTOM: CustomSplitStrategy,
    SplitType.SHARES: ShareSplitStrategy,
    SplitType.ITEMIZED: ItemizedSplitStrategy,
    SplitType.DURATION: DurationSplitStrategy,
}


def get_split_strategy(split_type) -> BaseSplitStrategy:
    """
    Get the strategy for a split type.

    Args:
        split_type: A ``SplitType`` or its string value.

    Raises:
        UnknownStrategy: If the type is not recognized.
    """
    try:
        key = SplitType(split_type)
    except ValueError:
        raise UnknownStrategy(split_type)
    return _STRATEGIES[key]()
