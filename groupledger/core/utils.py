from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Iterator, NamedTuple

getcontext().prec = 28
CENTS = Decimal("0.01")

BALANCE_KEY_SEPARATOR = "|"
_ESCAPE = "\\"


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_half_up(d: Decimal) -> int:
    return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class BalanceKey(NamedTuple):
    """Ordered member pair: ``debtor`` owes ``creditor``."""
    creditor: str
    debtor: str

    def reversed(self) -> "BalanceKey":
        return BalanceKey(self.debtor, self.creditor)


def _escape(member_id: str) -> str:
    return (
        member_id.replace(_ESCAPE, _ESCAPE * 2)
        .replace(BALANCE_KEY_SEPARATOR, _ESCAPE + BALANCE_KEY_SEPARATOR)
    )


def encode_balance_key(key: BalanceKey) -> str:
    """
    Flatten a pair for a string-keyed store.

    Backslashes and separators inside ids are escaped, so ids may contain
    any character.
    """
    return f"{_escape(key.creditor)}{BALANCE_KEY_SEPARATOR}{_escape(key.debtor)}"


def _unescape_parts(encoded: str) -> Iterator[str]:
    part = []
    chars = iter(encoded)
    for ch in chars:
        if ch == _ESCAPE:
            nxt = next(chars, None)
            if nxt is None:
                raise ValueError(f"Dangling escape in balance key: {encoded!r}")
            part.append(nxt)
        elif ch == BALANCE_KEY_SEPARATOR:
            yield "".join(part)
            part = []
        else:
            part.append(ch)
    yield "".join(part)


def decode_balance_key(encoded: str) -> BalanceKey:
    parts = list(_unescape_parts(encoded))
    if len(parts) != 2:
        raise ValueError(f"Malformed balance key: {encoded!r}")
    return BalanceKey(parts[0], parts[1])
