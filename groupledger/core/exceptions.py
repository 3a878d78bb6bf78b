"""
Domain exceptions for the group ledger.

Split validation errors are raised before any ledger mutation, so a failed
split never leaves a group half-updated.
"""


class LedgerError(Exception):
    """Base exception for ledger errors."""
    code = "ledger_error"


class SplitValidationError(LedgerError):
    """Raised when a split cannot be computed from its inputs."""
    code = "invalid_split"


class InvalidAmount(SplitValidationError):
    code = "invalid_amount"


class ParticipantSetEmpty(SplitValidationError):
    code = "participant_set_empty"

    def __init__(self, message="At least one participant is required"):
        super().__init__(message)


class MissingStrategyParameter(SplitValidationError):
    code = "missing_strategy_parameter"

    def __init__(self, member_id, parameter):
        self.member_id = member_id
        self.parameter = parameter
        super().__init__(f"Missing {parameter} for member {member_id}")


class UnknownParticipant(SplitValidationError):
    code = "unknown_participant"

    def __init__(self, member_id):
        self.member_id = member_id
        super().__init__(f"Member {member_id} is not a participant of this expense")


class PercentageSumMismatch(SplitValidationError):
    code = "percentage_sum_mismatch"

    def __init__(self, actual, expected=100):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Percentages must sum to {expected} (got {actual})")


class CustomAmountSumMismatch(SplitValidationError):
    code = "custom_amount_sum_mismatch"

    def __init__(self, actual, expected):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Amounts must sum to {expected} (got {actual})")


class UnknownStrategy(SplitValidationError):
    code = "unknown_strategy"

    def __init__(self, name):
        self.name = name
        super().__init__(f"Unknown split strategy: {name}")


class SelfPaymentError(LedgerError):
    code = "self_payment"

    def __init__(self, member_id):
        self.member_id = member_id
        super().__init__("Cannot record payment to the same member")


class GroupNotFoundError(LedgerError):
    code = "group_not_found"

    def __init__(self, group_id):
        self.group_id = group_id
        super().__init__(f"Group {group_id} not found")


class ExpenseNotFoundError(LedgerError):
    code = "expense_not_found"

    def __init__(self, expense_id):
        self.expense_id = expense_id
        super().__init__(f"Expense {expense_id} not found")


class NotGroupMemberError(LedgerError):
    code = "not_group_member"

    def __init__(self, member_id, group_id):
        self.member_id = member_id
        self.group_id = group_id
        super().__init__(f"Member {member_id} is not in group {group_id}")


class DuplicateMemberError(LedgerError):
    code = "duplicate_member"

    def __init__(self, member_id):
        self.member_id = member_id
        super().__init__(f"Member {member_id} is already in the group")


class GroupFullError(LedgerError):
    code = "group_full"

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"A group can have at most {limit} members")


class OutstandingBalanceError(LedgerError):
    code = "outstanding_balance"

    def __init__(self, member_id, net):
        self.member_id = member_id
        self.net = net
        super().__init__(f"Member {member_id} still has unsettled balances (net {net})")
