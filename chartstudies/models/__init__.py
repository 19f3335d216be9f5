"""Data models for chartstudies."""

from chartstudies.models.candle import Candle
from chartstudies.models.candle_set import CandleSet, TimeFrame

__all__ = [
    "Candle",
    "CandleSet",
    "TimeFrame",
]
