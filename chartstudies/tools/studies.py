"""Study calculation tools.

These tools run chart studies over a candle set and summarise the latest
values in a plain dict, reporting failures through an "error" key instead
of raising.
"""

import logging
from typing import Optional

from chartstudies.models import CandleSet
from chartstudies.studies import STUDIES, StudyStatus, create_study

logger = logging.getLogger(__name__)

DEFAULT_STUDIES = ["atr", "rsi", "sma", "ema"]


def calculate_studies(
    candle_set: CandleSet,
    studies: Optional[list[str]] = None,
    periods: Optional[dict[str, int]] = None,
) -> dict:
    """Calculate studies over a candle set.

    Args:
        candle_set: Candles to calculate over.
        studies: Study names to calculate. Options: "atr", "sma", "ema",
                 "rsi", "adx", "obv", "pc", "hl", "stoch".
                 If None, calculates DEFAULT_STUDIES.
        periods: Optional periods override per study name.

    Returns:
        Dictionary containing:
        - symbol: The candle set's symbol
        - data_points: Number of candles used
        - studies: Per study name, its description, tooltip, status,
          latest value (None unless calculated) and display text
        - instances: The calculated Study objects, keyed like studies
        - error: Error message if calculation failed (None if successful)
    """
    result = {
        "symbol": candle_set.symbol,
        "data_points": len(candle_set),
        "studies": {},
        "instances": {},
        "error": None,
    }

    if len(candle_set) == 0:
        result["error"] = f"No candles for {candle_set.symbol or 'symbol'}"
        return result

    names = [name.strip().lower() for name in (studies or DEFAULT_STUDIES)]
    unknown = [name for name in names if name not in STUDIES]
    if unknown:
        result["error"] = (
            f"Unknown studies: {', '.join(unknown)}. "
            f"Must be one of {', '.join(sorted(STUDIES))}"
        )
        return result

    periods = periods or {}
    try:
        for name in names:
            study = create_study(name, periods=periods.get(name))
            status = study.calculate(candle_set)
            calculated = status == StudyStatus.CALCULATED

            result["instances"][name] = study
            result["studies"][name] = {
                "description": study.study_description(),
                "tooltip": study.study_tooltip(),
                "status": status.value,
                "value": study[-1] if calculated else None,
                "display": study.display_value(-1) if calculated else None,
                "required_candles": study.first_valid_index + 1,
            }
    except ValueError as e:
        logger.debug("Study calculation failed: %s", e)
        result["error"] = str(e)

    return result
