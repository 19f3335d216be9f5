"""EMA - Exponential Moving Average study."""

from typing import Any, Sequence

from chartstudies.indicators.technical import calculate_ema, ema_step
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class EMA(Study):
    """Exponential moving average of closing prices.

    Seeded with the simple average of the first ``periods`` closes, then
    smoothed with multiplier ``2 / (periods + 1)``.
    """

    name = "ema"
    label = "exponential moving average"
    default_periods = 20
    use_right_axis = True

    def study_description(self) -> str:
        return f"EMA({self.periods})"

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return periods - 1

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, **params: Any
    ) -> dict[str, list[float]]:
        ema = calculate_ema([c.close for c in candles], periods)
        return {"values": backfill(ema, periods - 1)}

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        values = series["values"]
        values[i] = ema_step(values[i - 1], candles[i].close, self.periods)
