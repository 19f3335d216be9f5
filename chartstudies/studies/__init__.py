"""Chart studies.

Every study follows the Study interface in ``chartstudies.studies.base``.
"""

from typing import Any

from chartstudies.studies.adx import ADX
from chartstudies.studies.atr import ATR
from chartstudies.studies.base import NEUTRAL_VALUE, Study, StudyStatus, backfill
from chartstudies.studies.ema import EMA
from chartstudies.studies.obv import OBV
from chartstudies.studies.price_channel import PriceChannel
from chartstudies.studies.recent_high_low import RecentHighLow
from chartstudies.studies.rsi import RSI, RSIMode
from chartstudies.studies.sma import SMA
from chartstudies.studies.stochastic import Stochastic, StochasticMethod

STUDIES: dict[str, type[Study]] = {
    cls.name: cls
    for cls in (ATR, SMA, EMA, RSI, ADX, OBV, PriceChannel, RecentHighLow, Stochastic)
}


def create_study(name: str, **params: Any) -> Study:
    """Create a study by its registry name.

    Args:
        name: Study name (e.g. "atr", "rsi").
        **params: Constructor arguments (periods, ...).

    Raises:
        ValueError: If the name is unknown.
    """
    key = name.strip().lower()
    if key not in STUDIES:
        raise ValueError(f"Unknown study: {name}. Must be one of {sorted(STUDIES)}")
    return STUDIES[key](**params)


__all__ = [
    "ADX",
    "ATR",
    "EMA",
    "NEUTRAL_VALUE",
    "OBV",
    "PriceChannel",
    "RSI",
    "RSIMode",
    "RecentHighLow",
    "SMA",
    "STUDIES",
    "Stochastic",
    "StochasticMethod",
    "Study",
    "StudyStatus",
    "backfill",
    "create_study",
]
