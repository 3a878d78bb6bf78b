from typing import List, Sequence

from groupledger.core.money import Money
from groupledger.models.expense import Split
from groupledger.services.split_strategies import (
    BaseSplitStrategy,
    SplitType,
    get_split_strategy,
)


class ExpenseSplitter:
    """
    Strategy context for splitting expenses.

    Holds the current strategy (equal by default) and delegates to it.
    Swapping strategies never changes splits that were already returned.
    """

    def __init__(self, strategy=None):
        self._strategy = self._resolve(strategy if strategy is not None else SplitType.EQUAL)

    @staticmethod
    def _resolve(strategy) -> BaseSplitStrategy:
        if isinstance(strategy, BaseSplitStrategy):
            return strategy
        return get_split_strategy(strategy)

    def set_strategy(self, strategy) -> None:
        self._strategy = self._resolve(strategy)

    def current_strategy_name(self) -> str:
        return self._strategy.name

    def validate(self, total, members: Sequence[str], params=None) -> None:
        self._strategy.validate(Money.of(total), list(members), params)

    def split(self, total, members: Sequence[str], params=None) -> List[Split]:
        return self._strategy.calculate(total, members, params)
