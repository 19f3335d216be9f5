"""OBV - On Balance Volume study."""

from typing import Any, Sequence

from chartstudies.indicators.technical import calculate_obv, obv_step
from chartstudies.models import Candle, CandleSet
from chartstudies.studies.base import Study


class OBV(Study):
    """Running total of volume, added on up closes and subtracted on down closes.

    Has no window, so there is no warm-up and ``periods`` is unused.
    """

    name = "obv"
    label = "on balance volume"
    default_periods = 1

    @property
    def prepend_candles_needed(self) -> int:
        return 0

    def study_description(self) -> str:
        return "On Balance Volume"

    def study_tooltip(self) -> str:
        return self.study_description()

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return 0

    @classmethod
    def min_candles(cls, periods: int, **params: Any) -> int:
        return 1

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, **params: Any
    ) -> dict[str, list[float]]:
        obv = calculate_obv([c.close for c in candles], [float(c.volume) for c in candles])
        return {"values": obv}

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        values = series["values"]
        values[i] = obv_step(values[i - 1], candles[i].close, candles[i - 1].close, float(candles[i].volume))

    @classmethod
    def value_at(cls, index: int, candle_set: CandleSet, periods: int = 1, **params: Any) -> float:
        return super().value_at(index, candle_set, periods, **params)
