# backend/stockchart/schemas/series.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class RawPoint:
    """One upstream observation. `price` is None/NaN for non-trading periods."""
    timestamp: datetime
    price: Optional[float]


@dataclass(frozen=True)
class CleanPoint:
    date: datetime
    price: float


@dataclass
class SymbolSeries:
    symbol: str
    series: List[CleanPoint]


@dataclass
class SymbolFailure:
    symbol: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"symbol": self.symbol, "error": self.error}


@dataclass
class AggregateResult:
    successes: List[SymbolSeries] = field(default_factory=list)
    failures: List[SymbolFailure] = field(default_factory=list)
