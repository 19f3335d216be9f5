"""ADX - Average Directional Index study."""

from typing import Any, Optional, Sequence

from chartstudies.indicators.technical import (
    adx_components,
    directional_indicators,
    directional_movement,
    true_range,
    wilder_step,
)
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class ADX(Study):
    """Average Directional Index with +DI and -DI.

    True range and directional movement are smoothed over ``periods``;
    DX is then smoothed over ``smoothing_periods`` (defaults to ``periods``).
    The smoothed intermediates are kept so a live tick can be applied
    without recalculating the whole series.
    """

    name = "adx"
    label = "average directional index"
    default_periods = 14
    output_names = (
        "values",
        "plus_di",
        "minus_di",
        "dx",
        "smoothed_tr",
        "smoothed_plus_dm",
        "smoothed_minus_dm",
    )

    def __init__(
        self,
        periods: Optional[int] = None,
        smoothing_periods: Optional[int] = None,
    ):
        super().__init__(periods)
        if smoothing_periods is not None and smoothing_periods < 1:
            raise ValueError(f"smoothing_periods must be at least 1, got {smoothing_periods}")
        self._smoothing_periods = smoothing_periods

    @property
    def smoothing_periods(self) -> int:
        return self._smoothing_periods or self.periods

    @property
    def prepend_candles_needed(self) -> int:
        # ADX converges slowly, empirically about 12 periods of history
        return self.periods * 12

    def study_description(self) -> str:
        return f"ADX({self.periods},{self.smoothing_periods})"

    def params(self) -> dict[str, Any]:
        return {"smoothing": self.smoothing_periods}

    @classmethod
    def warmup_length(cls, periods: int, smoothing: Optional[int] = None, **params: Any) -> int:
        return periods + (smoothing or periods) - 1

    @classmethod
    def _compute(
        cls,
        candles: Sequence[Candle],
        periods: int,
        smoothing: Optional[int] = None,
        **params: Any,
    ) -> dict[str, list[float]]:
        smoothing = smoothing or periods
        components = adx_components(
            [c.high for c in candles],
            [c.low for c in candles],
            [c.close for c in candles],
            periods,
            smoothing,
        )
        series = {
            name: backfill(list(buffer), periods)
            for name, buffer in components._asdict().items()
            if name != "adx"
        }
        series["values"] = backfill(components.adx, periods + smoothing - 1)
        return series

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        candle, prev = candles[i], candles[i - 1]
        tr = true_range(candle.high, candle.low, prev.close)
        plus_dm, minus_dm = directional_movement(candle.high, candle.low, prev.high, prev.low)

        smoothed_tr = wilder_step(series["smoothed_tr"][i - 1], tr, self.periods)
        smoothed_plus_dm = wilder_step(series["smoothed_plus_dm"][i - 1], plus_dm, self.periods)
        smoothed_minus_dm = wilder_step(series["smoothed_minus_dm"][i - 1], minus_dm, self.periods)
        plus_di, minus_di, dx = directional_indicators(
            smoothed_plus_dm, smoothed_minus_dm, smoothed_tr
        )

        series["smoothed_tr"][i] = smoothed_tr
        series["smoothed_plus_dm"][i] = smoothed_plus_dm
        series["smoothed_minus_dm"][i] = smoothed_minus_dm
        series["plus_di"][i] = plus_di
        series["minus_di"][i] = minus_di
        series["dx"][i] = dx
        series["values"][i] = wilder_step(series["values"][i - 1], dx, self.smoothing_periods)

    def display_value(self, index: int) -> str:
        with self._lock:
            if self._series is None:
                return super().display_value(index)
            series = self._series
            return (
                f"{format(series['values'][index], self.decimal_format)}, "
                f"DI+ {series['plus_di'][index]:,.2f}, DI- {series['minus_di'][index]:,.2f}"
            )
