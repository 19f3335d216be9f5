"""Base study interface for chartstudies.

A study turns a CandleSet into one or more output buffers, one value per
candle, index-aligned with the candles. Every study supports:

1. A full recalculation over the whole series (``calculate``)
2. A cheap update of the last two values after a live tick (``update_tail``)
3. A stateless point evaluation at any index (``value_at``)

Indices before a study's first defined value are backfilled with that value
so a chart never draws gaps or zeros in the warm-up region.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional, Sequence

from chartstudies.models import Candle, CandleSet

logger = logging.getLogger(__name__)

# Returned for anything that has no meaningful value
NEUTRAL_VALUE = 0.0


class StudyStatus(str, Enum):
    """State of a study's output buffers."""

    NOT_CALCULATED = "not_calculated"
    INSUFFICIENT_DATA = "insufficient_data"
    WARMING_UP = "warming_up"
    CALCULATED = "calculated"


def backfill(values: list[float], first_valid: int) -> list[float]:
    """Fill every index before first_valid with values[first_valid], in place."""
    if 0 < first_valid < len(values):
        fill = values[first_valid]
        for i in range(first_valid):
            values[i] = fill
    return values


class Study(ABC):
    """Abstract base class for chart studies.

    Subclasses provide the math through three hooks:

    - ``warmup_length``: index of the first defined value for given parameters
    - ``_compute``: full calculation over a candle list, returning every
      output buffer (already backfilled)
    - ``_update_index``: recalculate one index from the values before it

    The base class owns the buffers, the bookkeeping that decides between
    the incremental and the full path, and the lock that keeps readers from
    seeing a half-updated buffer.
    """

    name: ClassVar[str] = ""
    label: ClassVar[str] = ""
    default_periods: ClassVar[int] = 14
    output_names: ClassVar[tuple[str, ...]] = ("values",)
    # True when values are prices drawn over the candles
    use_right_axis: ClassVar[bool] = False

    def __init__(self, periods: Optional[int] = None):
        periods = self.default_periods if periods is None else periods
        if periods < 1:
            raise ValueError(f"periods must be at least 1, got {periods}")

        self.periods = periods
        self.decimal_format = ",.2f"
        self.periods_last_calculated = 0
        self.time_last_calculated: Optional[datetime] = None

        self._series: Optional[dict[str, list[float]]] = None
        self._status = StudyStatus.NOT_CALCULATED
        self._params_last_calculated: dict[str, Any] = {}
        self._candle_set: Optional[CandleSet] = None
        self._generation = -1
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Description
    # ------------------------------------------------------------------

    @abstractmethod
    def study_description(self) -> str:
        """Short label for a chart legend, e.g. ``ATR(14)``."""
        pass

    def study_tooltip(self) -> str:
        """Longer description shown next to the short label."""
        return f"{self.study_description()} - {self.label}."

    def params(self) -> dict[str, Any]:
        """Study parameters other than periods."""
        return {}

    # ------------------------------------------------------------------
    # Warm-up
    # ------------------------------------------------------------------

    @classmethod
    @abstractmethod
    def warmup_length(cls, periods: int, **params: Any) -> int:
        """Index of the first mathematically defined value."""
        pass

    @classmethod
    def min_candles(cls, periods: int, **params: Any) -> int:
        """Fewest candles for which output buffers are produced at all."""
        return periods

    @property
    def first_valid_index(self) -> int:
        return self.warmup_length(self.periods, **self.params())

    @property
    def required_candles(self) -> int:
        return self.min_candles(self.periods, **self.params())

    @property
    def tail_lookback(self) -> int:
        """How many stored values before an index ``_update_index`` reads."""
        return 1

    @property
    def prepend_candles_needed(self) -> int:
        """Extra leading candles needed so the first visible value has converged."""
        return self.periods - 1

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    @classmethod
    @abstractmethod
    def _compute(
        cls, candles: Sequence[Candle], periods: int, **params: Any
    ) -> dict[str, list[float]]:
        """Calculate every output buffer over the whole candle list.

        Only called with more candles than ``warmup_length``.
        """
        pass

    @abstractmethod
    def _update_index(
        self, candles: Sequence[Candle], series: dict[str, list[float]], i: int
    ) -> None:
        """Recalculate index i of every buffer in place from index i-1."""
        pass

    def calculate(self, candle_set: CandleSet) -> StudyStatus:
        """Recalculate the study over the whole candle set.

        Args:
            candle_set: Candles to calculate over.

        Returns:
            INSUFFICIENT_DATA when there are fewer than ``required_candles``
            candles (buffers are left unset), WARMING_UP when there are not
            enough candles to get past the warm-up (buffers hold the neutral
            placeholder), otherwise CALCULATED.
        """
        with self._lock:
            n = len(candle_set)
            params = self.params()

            if n < self.min_candles(self.periods, **params):
                series = None
                status = StudyStatus.INSUFFICIENT_DATA
            elif n <= self.warmup_length(self.periods, **params):
                series = {name: [NEUTRAL_VALUE] * n for name in self.output_names}
                status = StudyStatus.WARMING_UP
            else:
                series = self._compute(candle_set.candles, self.periods, **params)
                status = StudyStatus.CALCULATED

            # Buffers are built aside and published in one step
            self._series = series
            self._status = status
            self._candle_set = candle_set
            self._generation = candle_set.generation
            self._params_last_calculated = params
            self.periods_last_calculated = self.periods
            self.decimal_format = f",.{candle_set.decimals}f"
            self.time_last_calculated = datetime.now()

            logger.debug("%s calculated over %d candles: %s", self.study_description(), n, status.value)
            return status

    def _stale_reason(self, candle_set: CandleSet) -> Optional[str]:
        """Why the incremental path can't be used, or None if it can."""
        if self._series is None or self._status != StudyStatus.CALCULATED:
            return "no calculated values"
        if self.periods != self.periods_last_calculated:
            return f"periods changed {self.periods_last_calculated} -> {self.periods}"
        if self.params() != self._params_last_calculated:
            return "parameters changed"
        if candle_set is not self._candle_set or candle_set.generation != self._generation:
            return "candle set reloaded"

        n = len(candle_set)
        length = len(self._series["values"])
        if length not in (n - 1, n):
            return f"buffer has {length} values for {n} candles"
        # Values read by the update must lie past the backfilled warm-up
        if n - 2 - self.tail_lookback < self.first_valid_index:
            return "series too short for incremental update"
        return None

    def update_tail(self, candle_set: CandleSet) -> StudyStatus:
        """Recalculate only the last two values after a live tick.

        Handles one newly appended candle and a revised last candle. Falls
        back to a full ``calculate`` whenever the previous results can't be
        reused (periods changed, nothing calculated yet, data reloaded, more
        than one candle added, or the series is still too short).

        Returns:
            The study status after the update.
        """
        with self._lock:
            reason = self._stale_reason(candle_set)
            if reason is not None:
                logger.debug("%s: full recalculation (%s)", self.study_description(), reason)
                return self.calculate(candle_set)

            n = len(candle_set)
            for buffer in self._series.values():
                if len(buffer) < n:
                    buffer.append(NEUTRAL_VALUE)

            for i in (n - 2, n - 1):
                self._update_index(candle_set.candles, self._series, i)

            self.decimal_format = f",.{candle_set.decimals}f"
            self.time_last_calculated = datetime.now()
            return self._status

    # ------------------------------------------------------------------
    # Stateless point evaluation
    # ------------------------------------------------------------------

    @classmethod
    def value_at(
        cls, index: int, candle_set: CandleSet, periods: int, **params: Any
    ) -> float:
        """Calculate the study value at one index from scratch.

        Does not use or touch any study instance, at the cost of
        recalculating from the first candle up to index on every call.

        Args:
            index: Candle index to evaluate.
            candle_set: Candles to evaluate over.
            periods: Window length.
            **params: Study-specific parameters.

        Returns:
            The value rounded to the candle set's display precision, or
            NEUTRAL_VALUE when periods is not positive, index is out of
            range or index falls inside the warm-up.
        """
        if periods < 1 or index < 0 or index >= len(candle_set):
            return NEUTRAL_VALUE
        if index < cls.warmup_length(periods, **params):
            return NEUTRAL_VALUE

        series = cls._compute(candle_set.candles[:index + 1], periods, **params)
        return round(series["values"][index], candle_set.decimals)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def status(self) -> StudyStatus:
        return self._status

    @property
    def is_loaded(self) -> bool:
        return self._series is not None

    @property
    def values(self) -> Optional[list[float]]:
        """Copy of the main output buffer, or None if not calculated."""
        return self.series("values")

    def series(self, name: str) -> Optional[list[float]]:
        """Copy of a named output buffer, or None if not calculated.

        Raises:
            KeyError: If the study has no buffer with that name.
        """
        if name not in self.output_names:
            raise KeyError(f"{type(self).__name__} has no output '{name}'")
        with self._lock:
            if self._series is None:
                return None
            return list(self._series[name])

    def snapshot(self) -> Optional[dict[str, list[float]]]:
        """Copy of every output buffer taken under a single lock."""
        with self._lock:
            if self._series is None:
                return None
            return {name: list(self._series[name]) for name in self.output_names}

    def reset(self) -> None:
        """Drop calculated values, e.g. when the study is detached."""
        with self._lock:
            self._series = None
            self._status = StudyStatus.NOT_CALCULATED
            self._candle_set = None
            self._generation = -1

    def __getitem__(self, index: int) -> float:
        with self._lock:
            if self._series is None:
                return NEUTRAL_VALUE
            return self._series["values"][index]

    def __len__(self) -> int:
        with self._lock:
            return 0 if self._series is None else len(self._series["values"])

    def display_value(self, index: int) -> str:
        return format(self[index], self.decimal_format)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.study_description()} {self._status.value}>"
