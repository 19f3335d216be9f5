"""Tools for loading candles and calculating studies.

Each tool returns plain Python data so it can be used from the CLI or
from other programs without touching the study classes directly.
"""

from chartstudies.tools.candles import load_candle_set, load_candles_csv
from chartstudies.tools.studies import DEFAULT_STUDIES, calculate_studies

__all__ = [
    "DEFAULT_STUDIES",
    "calculate_studies",
    "load_candle_set",
    "load_candles_csv",
]
