"""
Balance ledger tests.

Covers:
- Expense application and reversal
- Payment netting and overpayment flips
- One direction per pair, no zero entries
- Snapshot / restore and the flat store encoding
"""
import pytest

from groupledger.core.exceptions import InvalidAmount, SelfPaymentError
from groupledger.core.money import Money
from groupledger.core.utils import BalanceKey, decode_balance_key, encode_balance_key
from groupledger.models.expense import Split
from groupledger.services.balance_ledger import BalanceLedger, LedgerDelta
from groupledger.services.split_strategies import EqualSplitStrategy

MEMBERS = ["A", "B", "C"]


def equal_splits(total, members=MEMBERS):
    return EqualSplitStrategy().calculate(Money.of(total), members)


def assert_one_direction(ledger):
    for key, amount in ledger.items():
        assert amount.is_positive
        assert key.reversed() not in ledger


class TestApplyExpense:

    def test_sharers_owe_the_payer(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits(300))

        assert ledger.snapshot() == {
            BalanceKey("A", "B"): Money.of(100),
            BalanceKey("A", "C"): Money.of(100),
        }

    def test_payer_share_creates_no_entry(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", [Split("A", Money.of(50))])
        assert ledger.is_settled()

    def test_zero_share_creates_no_entry(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", [Split("A", Money.of(10)), Split("B", Money.zero())])
        assert len(ledger) == 0

    def test_opposite_expenses_net(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits(60, ["A", "B"]))
        ledger.apply_expense_split("B", equal_splits(20, ["A", "B"]))

        assert ledger.snapshot() == {BalanceKey("A", "B"): Money.of(20)}

    def test_opposite_expenses_flip_direction(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits(20, ["A", "B"]))
        ledger.apply_expense_split("B", equal_splits(50, ["A", "B"]))

        assert ledger.snapshot() == {BalanceKey("B", "A"): Money.of(15)}

    def test_exact_cancel_drops_entry(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits(40, ["A", "B"]))
        ledger.apply_expense_split("B", equal_splits(40, ["A", "B"]))

        assert ledger.is_settled()
        assert ("A", "B") not in ledger

    def test_revert_undoes_apply(self):
        ledger = BalanceLedger({BalanceKey("B", "C"): Money.of(7)})
        before = ledger.snapshot()
        splits = equal_splits("100.01")

        ledger.apply_expense_split("A", splits)
        ledger.revert_expense_split("A", splits)

        assert ledger.snapshot() == before

    def test_net_positions_sum_to_zero(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits("100.00"))
        ledger.apply_expense_split("B", equal_splits("47.11"))
        ledger.apply_expense_split("C", equal_splits("12.34", ["B", "C"]))

        net = ledger.net_positions(MEMBERS)
        assert sum(net.values(), Money.zero()) == Money.zero()
        assert_one_direction(ledger)


class TestApplyPayment:

    def test_payment_reduces_debt(self):
        ledger = BalanceLedger()
        ledger.apply_expense_split("A", equal_splits(300))
        ledger.apply_payment("B", "A", 100)

        assert ledger.snapshot() == {BalanceKey("A", "C"): Money.of(100)}
        assert ledger.net_position("A") == Money.of(100)
        assert ledger.net_position("B") == Money.zero()
        assert ledger.net_position("C") == Money.of(-100)

    def test_partial_payment(self):
        ledger = BalanceLedger({BalanceKey("A", "B"): Money.of(100)})
        ledger.apply_payment("B", "A", "40.50")
        assert ledger.get("A", "B") == Money.of("59.50")

    def test_overpayment_flips_direction(self):
        ledger = BalanceLedger({BalanceKey("A", "B"): Money.of(30)})
        ledger.apply_payment("B", "A", 50)

        assert ledger.snapshot() == {BalanceKey("B", "A"): Money.of(20)}
        assert ledger.balance_between("A", "B") == Money.of(-20)

    def test_payment_without_debt_creates_credit(self):
        ledger = BalanceLedger()
        ledger.apply_payment("B", "A", 25)
        assert ledger.snapshot() == {BalanceKey("B", "A"): Money.of(25)}

    @pytest.mark.parametrize("amount", [0, -5, "0.00"])
    def test_non_positive_amount_rejected(self, amount):
        ledger = BalanceLedger()
        with pytest.raises(InvalidAmount):
            ledger.apply_payment("B", "A", amount)

    def test_self_payment_rejected(self):
        ledger = BalanceLedger({BalanceKey("A", "B"): Money.of(5)})
        with pytest.raises(SelfPaymentError):
            ledger.apply_payment("A", "A", 5)
        assert ledger.get("A", "B") == Money.of(5)


class TestSnapshotRestore:

    def test_snapshot_is_a_copy(self):
        ledger = BalanceLedger({BalanceKey("A", "B"): Money.of(10)})
        snap = ledger.snapshot()
        snap[BalanceKey("A", "C")] = Money.of(99)
        assert ("A", "C") not in ledger

    def test_restore_nets_and_flips(self):
        ledger = BalanceLedger()
        ledger.restore({
            BalanceKey("A", "B"): Money.of(50),
            BalanceKey("B", "A"): Money.of(20),
            BalanceKey("C", "A"): Money.of(-15),
            BalanceKey("C", "B"): Money.zero(),
        })
        assert ledger.snapshot() == {
            BalanceKey("A", "B"): Money.of(30),
            BalanceKey("A", "C"): Money.of(15),
        }

    def test_failed_restore_keeps_old_entries(self):
        ledger = BalanceLedger({BalanceKey("A", "B"): Money.of(10)})
        with pytest.raises(InvalidAmount):
            ledger.restore({BalanceKey("A", "C"): "lots"})
        assert ledger.snapshot() == {BalanceKey("A", "B"): Money.of(10)}

    def test_prune_drops_non_members(self):
        ledger = BalanceLedger({
            BalanceKey("A", "B"): Money.of(10),
            BalanceKey("A", "Z"): Money.of(5),
        })
        stale = ledger.prune(["A", "B"])

        assert stale == [BalanceKey("A", "Z")]
        assert ledger.snapshot() == {BalanceKey("A", "B"): Money.of(10)}

    def test_store_encoding(self):
        ledger = BalanceLedger({
            BalanceKey("a|b", "c\\d"): Money.of("12.34"),
            BalanceKey("A", "B"): Money.of(1),
        })
        flat = ledger.to_dict()

        assert flat["A|B"] == 100
        assert BalanceLedger.from_dict(flat).snapshot() == ledger.snapshot()

    def test_empty_from_dict(self):
        assert BalanceLedger.from_dict(None).is_settled()


class TestBalanceKeyEncoding:

    @pytest.mark.parametrize("key", [
        BalanceKey("alice", "bob"),
        BalanceKey("x|y", "z"),
        BalanceKey("back\\slash", "pipe|"),
        BalanceKey("", "b"),
    ])
    def test_ids_with_special_characters(self, key):
        assert decode_balance_key(encode_balance_key(key)) == key

    @pytest.mark.parametrize("encoded", ["no-separator", "a|b|c", "a|b\\"])
    def test_malformed(self, encoded):
        with pytest.raises(ValueError):
            decode_balance_key(encoded)


def test_ledger_delta_lists_changed_pairs():
    before = {BalanceKey("A", "B"): Money.of(10), BalanceKey("A", "C"): Money.of(5)}
    after = {BalanceKey("A", "C"): Money.of(5), BalanceKey("B", "C"): Money.of(3)}

    delta = LedgerDelta.between(before, after)

    assert delta.changes == {
        BalanceKey("A", "B"): (Money.of(10), Money.zero()),
        BalanceKey("B", "C"): (Money.zero(), Money.of(3)),
    }
    assert delta.balances == after
