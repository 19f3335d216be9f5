"""Stochastic Oscillator study."""

from enum import Enum
from typing import Any, Optional, Sequence

from chartstudies.indicators.technical import (
    ema_step,
    stochastic_components,
    stochastic_raw_k,
    window_mean,
)
from chartstudies.models import Candle
from chartstudies.studies.base import Study, backfill


class StochasticMethod(str, Enum):
    """Average used for %K smoothing and %D."""

    SMA = "sma"
    EMA = "ema"


class Stochastic(Study):
    """Stochastic oscillator: %K in ``values``, %D in ``d``.

    ``periods`` is the %K lookback. %K is optionally smoothed over
    ``k_smoothing`` candles and %D is %K averaged over ``d_periods`` candles,
    both with a simple or an exponential average depending on ``method``.
    Every buffer is backfilled up to the first %D value.
    """

    name = "stoch"
    label = "stochastic"
    default_periods = 14
    output_names = ("values", "d", "raw_k")

    def __init__(
        self,
        periods: Optional[int] = None,
        d_periods: int = 3,
        k_smoothing: int = 1,
        method: StochasticMethod = StochasticMethod.SMA,
    ):
        super().__init__(periods)
        if d_periods < 1 or k_smoothing < 1:
            raise ValueError(
                f"d_periods and k_smoothing must be at least 1, got {d_periods}, {k_smoothing}"
            )
        self.d_periods = d_periods
        self.k_smoothing = k_smoothing
        self.method = StochasticMethod(method)

    @property
    def prepend_candles_needed(self) -> int:
        return self.first_valid_index

    @property
    def tail_lookback(self) -> int:
        if self.method == StochasticMethod.EMA:
            return 1
        return max(1, self.k_smoothing - 1, self.d_periods - 1)

    def study_description(self) -> str:
        return (
            f"Stoch({self.periods},{self.d_periods},{self.k_smoothing},"
            f"{self.method.name})"
        )

    def params(self) -> dict[str, Any]:
        return {
            "d_periods": self.d_periods,
            "k_smoothing": self.k_smoothing,
            "method": self.method,
        }

    @classmethod
    def warmup_length(
        cls, periods: int, d_periods: int = 3, k_smoothing: int = 1, **params: Any
    ) -> int:
        return (periods - 1) + (k_smoothing - 1) + (d_periods - 1)

    @classmethod
    def _compute(
        cls,
        candles: Sequence[Candle],
        periods: int,
        d_periods: int = 3,
        k_smoothing: int = 1,
        method: StochasticMethod = StochasticMethod.SMA,
        **params: Any,
    ) -> dict[str, list[float]]:
        raw_k, k, d = stochastic_components(
            [c.high for c in candles],
            [c.low for c in candles],
            [c.close for c in candles],
            periods,
            d_periods,
            k_smoothing,
            StochasticMethod(method).value,
        )
        first = cls.warmup_length(periods, d_periods, k_smoothing)
        return {
            "values": backfill(k, first),
            "d": backfill(d, first),
            "raw_k": backfill(raw_k, first),
        }

    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        window = candles[i - self.periods + 1:i + 1]
        last = len(window) - 1
        raw_k = series["raw_k"]
        raw_k[i] = stochastic_raw_k(
            [c.high for c in window],
            [c.low for c in window],
            [c.close for c in window],
            last,
            self.periods,
        )

        ema = self.method == StochasticMethod.EMA
        k = series["values"]
        if self.k_smoothing == 1:
            k[i] = raw_k[i]
        elif ema:
            k[i] = ema_step(k[i - 1], raw_k[i], self.k_smoothing)
        else:
            k[i] = window_mean(raw_k, i, self.k_smoothing)

        d = series["d"]
        if ema and self.d_periods > 1:
            d[i] = ema_step(d[i - 1], k[i], self.d_periods)
        else:
            d[i] = window_mean(k, i, self.d_periods)

    def cross(self, index: int) -> int:
        """Check for a %K / %D crossover at index.

        %K was above when it was at or over %D on the previous candle and is
        above when it is strictly over %D now.

        Returns:
            1 if %K crossed above %D, -1 if it crossed below, 0 otherwise
            (including an index outside the series).
        """
        snapshot = self.snapshot()
        if snapshot is None:
            return 0
        k, d = snapshot["values"], snapshot["d"]
        if index < 1 or index >= len(k):
            return 0
        was_above = k[index - 1] >= d[index - 1]
        now_above = k[index] > d[index]
        if now_above and not was_above:
            return 1
        if was_above and not now_above:
            return -1
        return 0
