import re
import unicodedata
from typing import Dict, List, Optional, Tuple

from stockchart.core.errors import ValidationError

_ALLOWED = re.compile(r"^[A-Z0-9.\-^=]{1,15}$")
INVALID_TICKER = "Invalid ticker format"


def normalize_ticker(raw: str) -> str:
    s = unicodedata.normalize("NFKC", str(raw or ""))
    s = s.replace("\u00A0", " ").strip()      # NBSP
    s = "".join(ch for ch in s if not ch.isspace())
    return s.upper()


def validate_ticker(raw: str) -> str:
    t = normalize_ticker(raw)
    if not is_valid_ticker(t):
        raise ValidationError(f"{INVALID_TICKER}: {raw!r}")
    return t


def is_valid_ticker(symbol: str) -> bool:
    return bool(_ALLOWED.match(symbol))


def validate_symbols(raw: Optional[List[str]], max_symbols: int) -> Tuple[List[str], Dict[str, str]]:
    """
    Normalize a requested symbol list.

    Returns (symbols, rejected): every normalized symbol in request order
    (duplicates collapse to their first occurrence), plus the ones whose
    format is invalid mapped to an error message. Those are reported per
    symbol; only an empty/missing list, an over-limit list, or a list with
    no valid symbol at all is rejected outright.
    """
    if not raw or not isinstance(raw, list):
        raise ValidationError(
            "Stock symbols required",
            usage='POST body: { "symbols": ["AAPL", "GOOGL"], "range": "1Y" }',
        )
    if len(raw) > max_symbols:
        raise ValidationError(f"Maximum {max_symbols} symbols allowed for comparison")

    symbols: List[str] = []
    rejected: Dict[str, str] = {}
    for s in raw:
        t = normalize_ticker(s)
        if t in symbols:
            continue
        symbols.append(t)
        if not is_valid_ticker(t):
            rejected[t] = INVALID_TICKER

    if len(rejected) == len(symbols):
        raise ValidationError(
            INVALID_TICKER,
            details=[{"symbol": s, "error": e} for s, e in rejected.items()],
        )
    return symbols, rejected
