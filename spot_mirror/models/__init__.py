"""Data models"""

from .price import (
    SpotPrice,
    CachedQuote,
    CacheLookup,
    SpotPriceResponse,
    ErrorResponse,
    HealthResponse,
)
from .poller import FailureReason, FetchOutcome, CycleSummary

__all__ = [
    # Price models
    "SpotPrice",
    "CachedQuote",
    "CacheLookup",
    "SpotPriceResponse",
    "ErrorResponse",
    "HealthResponse",
    # Poller models
    "FailureReason",
    "FetchOutcome",
    "CycleSummary",
]
