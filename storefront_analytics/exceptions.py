"""
Analytics Error Taxonomy

Errors raised by the reporting layer. Value-domain errors also subclass
ValueError so callers that only know the builtin still catch them.
"""

from typing import Any, Dict


class AnalyticsError(Exception):
    """Base class for reporting errors"""

    def to_dict(self) -> Dict[str, Any]:
        """Structured error payload for API responses and logs"""
        return {
            "error": type(self).__name__,
            "message": str(self),
        }


class InvalidRangeError(AnalyticsError, ValueError):
    """Start of a requested range lies after its end"""

    def __init__(self, start: Any, end: Any):
        self.start = start
        self.end = end
        super().__init__(f"Range start {start} is after range end {end}")


class InvalidGranularityError(AnalyticsError, ValueError):
    """Granularity is not one of day, week or month"""

    def __init__(self, granularity: Any):
        self.granularity = granularity
        super().__init__(f"Unsupported granularity: {granularity!r}")


class OutOfRangeError(AnalyticsError, ValueError):
    """A rating fell outside the 1..5 star scale"""

    def __init__(self, rating: Any, index: int):
        self.rating = rating
        self.index = index
        super().__init__(f"Rating {rating!r} at position {index} is outside 1..5")


class UnknownTimeframeError(AnalyticsError, ValueError):
    """Timeframe preset is not recognized"""

    def __init__(self, preset: str, allowed: Any):
        self.preset = preset
        self.allowed = list(allowed)
        super().__init__(f"Unknown timeframe {preset!r}, expected one of {self.allowed}")


class UnsupportedFormatError(AnalyticsError, ValueError):
    """Export file has a suffix the loader cannot read"""
