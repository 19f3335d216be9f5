"""Recent High/Low study."""

from typing import Any, Optional, Sequence

from chartstudies.indicators.technical import (
    calculate_price_channel,
    find_swing_points,
    is_swing_high,
    is_swing_low,
    window_max,
    window_min,
)
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class RecentHighLow(Study):
    """Recent highs and lows.

    ``values`` is the highest high and ``lows`` the lowest low over the
    trailing ``periods`` candles. Swing points, candles whose high (low)
    beats ``strength`` candles on each side, are flagged with 1.0 in
    ``swing_high`` / ``swing_low``.
    """

    name = "hl"
    label = "mark meaningful highs and lows"
    default_periods = 20
    output_names = ("values", "lows", "swing_high", "swing_low")
    use_right_axis = True

    def __init__(
        self,
        periods: Optional[int] = None,
        strength: int = 3,
    ):
        super().__init__(periods)
        if strength < 1:
            raise ValueError(f"strength must be at least 1, got {strength}")
        self.strength = strength

    @property
    def prepend_candles_needed(self) -> int:
        return max(self.periods - 1, self.strength)

    def study_description(self) -> str:
        return f"High/Low({self.periods})"

    def params(self) -> dict[str, Any]:
        return {"strength": self.strength}

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return periods - 1

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, strength: int = 3, **params: Any
    ) -> dict[str, list[float]]:
        highs = [c.high for c in candles]
        lows = [c.low for c in candles]
        upper, lower = calculate_price_channel(highs, lows, periods)

        swing_high = [0.0] * len(candles)
        swing_low = [0.0] * len(candles)
        high_idx, low_idx = find_swing_points(highs, lows, strength)
        for i in high_idx:
            swing_high[i] = 1.0
        for i in low_idx:
            swing_low[i] = 1.0

        return {
            "values": backfill(upper, periods - 1),
            "lows": backfill(lower, periods - 1),
            "swing_high": swing_high,
            "swing_low": swing_low,
        }

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        window = candles[i - self.periods + 1:i + 1]
        last = len(window) - 1
        series["values"][i] = window_max([c.high for c in window], last, self.periods)
        series["lows"][i] = window_min([c.low for c in window], last, self.periods)

        # The newest candle can only confirm a swing point `strength` candles back
        j = i - self.strength
        if j >= self.strength:
            neighbours = candles[j - self.strength:i + 1]
            highs = [c.high for c in neighbours]
            lows = [c.low for c in neighbours]
            series["swing_high"][j] = 1.0 if is_swing_high(highs, self.strength, self.strength) else 0.0
            series["swing_low"][j] = 1.0 if is_swing_low(lows, self.strength, self.strength) else 0.0

    def swing_highs(self) -> list[int]:
        """Indices of confirmed swing highs."""
        flags = self.series("swing_high") or []
        return [i for i, flag in enumerate(flags) if flag]

    def swing_lows(self) -> list[int]:
        """Indices of confirmed swing lows."""
        flags = self.series("swing_low") or []
        return [i for i, flag in enumerate(flags) if flag]
