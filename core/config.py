# Purpose: This file defines configuration constants for the gilts pipeline.
# It centralizes defaults like coupon frequency, solver tolerances, source column
# layouts and the logging setup so they can be adjusted without touching the
# analytics code. Runtime overrides live in settings.yaml (see core.settings_loader).

"""
Configuration constants for the gilts pipeline.
"""

import os
from pathlib import Path
from typing import Dict

# Base directory of the project (core/ lives one level below the root)
BASE_DIR = Path(__file__).resolve().parent.parent

# Standard output column name constants
SOURCE_COL = "Source"
ERROR_COL = "Error"
ROW_INDEX_COL = "Row"
ROW_COL = "RawRow"

# Instrument conventions
COUPON_FREQUENCY = 2  # UK gilts pay semiannually
DEFAULT_FACE_PRICE = 100.0
GILT_ISIN_PREFIX = "GB"
MATURITY_DATE_FORMAT = "%d-%b-%Y"  # e.g. 07-Sep-2025
SETTLEMENT_DATE_FORMAT = "%Y-%m-%d"
UNSUPPORTED_DESC_MARKERS = ["index-linked"]

# Newton-Raphson defaults
DEFAULT_TOLERANCE = 0.001
DEFAULT_MAX_ITERATIONS = 1000
DERIVATIVE_FLOOR = 1e-12

# Source identifiers
SOURCE_DMO = "DMO"
SOURCE_DIVIDEND_DATA = "DividendData"

# Sources that stamp their own publication date, which must match the settlement date
DATED_SOURCES = [SOURCE_DIVIDEND_DATA]

# Default column positions per source. Overridable via settings.yaml -> sources.
SOURCE_LAYOUTS: Dict[str, Dict[str, int]] = {
    SOURCE_DMO: {
        "isin": 0,
        "desc": 1,
        "clean_price": 2,
        "dirty_price": 3,
        "maturity_date": 7,
    },
    SOURCE_DIVIDEND_DATA: {
        "ticker": 0,
        "desc": 1,
        "coupon": 2,
        "maturity_date": 3,
        "clean_price": 5,
        "yield_to_maturity": 6,
    },
}

# Logging configuration used by the drivers in tools/
LOG_DIR = os.getenv("GILTS_LOG_DIR", os.path.join(BASE_DIR, "instance"))

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "formatter": "standard",
            "class": "logging.StreamHandler",
        },
        "file": {
            "level": "DEBUG",
            "formatter": "standard",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": os.path.join(LOG_DIR, "gilts.log"),
            "maxBytes": 1024 * 1024 * 10,  # 10 MB
            "backupCount": 5,
            "mode": "a",
        },
    },
    "loggers": {
        "": {  # root logger
            "handlers": ["console", "file"],
            "level": "DEBUG",
        },
    },
}
