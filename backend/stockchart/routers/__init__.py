"""
Router modules for API endpoints
"""

from . import chart
from . import stock

__all__ = ["chart", "stock"]
