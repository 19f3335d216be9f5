"""Price Channel study."""

from typing import Any, Optional, Sequence

from chartstudies.indicators.technical import calculate_price_channel, window_max, window_min
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


def _bounds(candles: Sequence[Candle], use_close: bool) -> tuple[list[float], list[float]]:
    if use_close:
        closes = [c.close for c in candles]
        return closes, closes
    return [c.high for c in candles], [c.low for c in candles]


class PriceChannel(Study):
    """Highest and lowest price over the trailing ``periods`` candles.

    ``values`` holds the channel midline; the bands are in ``upper`` and
    ``lower``. With ``use_close`` the channel is built from closing prices
    instead of highs and lows.
    """

    name = "pc"
    label = "price channel"
    default_periods = 20
    output_names = ("values", "upper", "lower")
    use_right_axis = True

    def __init__(
        self,
        periods: Optional[int] = None,
        use_close: bool = False,
    ):
        super().__init__(periods)
        self.use_close = use_close

    def study_description(self) -> str:
        return f"PC({self.periods})"

    def params(self) -> dict[str, Any]:
        return {"use_close": self.use_close}

    @classmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        return periods - 1

    @classmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, use_close: bool = False, **params: Any
    ) -> dict[str, list[float]]:
        highs, lows = _bounds(candles, use_close)
        upper, lower = calculate_price_channel(highs, lows, periods)
        backfill(upper, periods - 1)
        backfill(lower, periods - 1)
        middle = [(u + l) / 2 for u, l in zip(upper, lower)]
        return {"values": middle, "upper": upper, "lower": lower}

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        highs, lows = _bounds(candles[i - self.periods + 1:i + 1], self.use_close)
        last = len(highs) - 1
        upper = window_max(highs, last, self.periods)
        lower = window_min(lows, last, self.periods)
        series["upper"][i] = upper
        series["lower"][i] = lower
        series["values"][i] = (upper + lower) / 2

    def display_value(self, index: int) -> str:
        with self._lock:
            if self._series is None:
                return super().display_value(index)
            upper = format(self._series["upper"][index], self.decimal_format)
            lower = format(self._series["lower"][index], self.decimal_format)
            return f"{upper} - {lower}"
