from decimal import Decimal

import pytest

from groupledger.core.exceptions import PercentageSumMismatch, UnknownStrategy
from groupledger.core.money import Money
from groupledger.services.expense_services import build_strategy_params, split_expense
from groupledger.services.expense_splitter import ExpenseSplitter
from groupledger.services.split_strategies import ShareSplitStrategy, SplitType


class TestExpenseSplitter:

    def test_defaults_to_equal(self):
        splitter = ExpenseSplitter()
        assert splitter.current_strategy_name() == "equal"

        splits = splitter.split(Money.of(90), ["A", "B", "C"])
        assert [s.amount for s in splits] == [Money.of(30)] * 3

    def test_set_strategy_by_name_enum_or_instance(self):
        splitter = ExpenseSplitter()

        splitter.set_strategy("percentage")
        assert splitter.current_strategy_name() == "percentage"

        splitter.set_strategy(SplitType.DURATION)
        assert splitter.current_strategy_name() == "duration"

        splitter.set_strategy(ShareSplitStrategy())
        assert splitter.current_strategy_name() == "shares"

    def test_switching_strategy_leaves_earlier_results_alone(self):
        splitter = ExpenseSplitter()
        first = splitter.split(Money.of(100), ["A", "B"])

        splitter.set_strategy("custom")
        second = splitter.split(Money.of(100), ["A", "B"], {"A": 70, "B": 30})

        assert [s.amount for s in first] == [Money.of(50), Money.of(50)]
        assert [s.amount for s in second] == [Money.of(70), Money.of(30)]

    def test_unknown_strategy_keeps_current(self):
        splitter = ExpenseSplitter("shares")
        with pytest.raises(UnknownStrategy):
            splitter.set_strategy("lottery")
        assert splitter.current_strategy_name() == "shares"

    def test_validate_without_splitting(self):
        splitter = ExpenseSplitter(SplitType.PERCENTAGE)
        splitter.validate("100", ["A", "B"], {"A": 50, "B": 50})
        with pytest.raises(PercentageSumMismatch):
            splitter.validate("100", ["A", "B"], {"A": 50, "B": 40})


def test_split_expense_uses_configured_default():
    splits = split_expense(Decimal("100"), ["A", "B", "C"])
    assert [s.amount for s in splits] == [Money.of("33.34"), Money.of("33.33"), Money.of("33.33")]


def test_split_expense_with_params():
    params = build_strategy_params("shares", {"A": Decimal("3"), "B": Decimal("1")})
    splits = split_expense("40", ["A", "B"], "shares", params)
    assert [s.amount for s in splits] == [Money.of(30), Money.of(10)]
