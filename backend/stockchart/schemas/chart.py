# backend/stockchart/schemas/chart.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ChartRequest(BaseModel):
    symbols: Optional[List[str]] = None
    range: Optional[str] = "1Y"


class ChartResponse(BaseModel):
    success: bool = True
    image: str                       # data URI
    symbols: List[str]
    range: str
    debug: List[Dict[str, Any]] = Field(default_factory=list)


class HistoryResponse(BaseModel):
    s: str = "ok"
    t: List[int]
    c: List[float]
    symbol: str
    range: str


class StockDataRequest(BaseModel):
    symbol: Optional[str] = None
    endpoint: Optional[str] = "quote"
