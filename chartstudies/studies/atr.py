"""ATR - Average True Range study."""

from typing import Any, Sequence

from chartstudies.indicators.technical import calculate_atr, true_range, wilder_step
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class ATR(Study):
    """Average True Range with Wilder's smoothing.

    The true range of each candle includes the gap from the previous close.
    ATR is seeded at index ``periods`` with the mean of true ranges
    1..periods, then smoothed with ``(prev * (periods - 1) + tr) / periods``.
    Earlier indices repeat the seed value.
    """

    name = "atr"
    label = "average true range"
    default_periods = 14

    def study_description(self) -> str:
        return f"ATR({self.periods})"

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        # True range 0 has no previous close and stays out of the seed
        return periods

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, **params: Any
    ) -> dict[str, list[float]]:
        atr = calculate_atr(
            [c.high for c in candles],
            [c.low for c in candles],
            [c.close for c in candles],
            periods,
        )
        return {"values": backfill(atr, periods)}

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        values = series["values"]
        tr = true_range(candles[i].high, candles[i].low, candles[i - 1].close)
        values[i] = wilder_step(values[i - 1], tr, self.periods)
