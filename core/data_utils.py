# Purpose: Helpers for loading raw source documents into rows of text cells.
# Source files are read header-less and untyped; every cell comes back as a
# string so the parser sees exactly what the publisher wrote.

import logging
import os
import zipfile
from typing import List, Optional

import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def _frame_to_rows(df: pd.DataFrame) -> List[List[str]]:
    rows: List[List[str]] = []
    for record in df.itertuples(index=False, name=None):
        cells = ["" if pd.isna(v) else str(v) for v in record]
        # Trailing empty cells come from ragged rows being padded to the widest row
        while cells and cells[-1] == "":
            cells.pop()
        rows.append(cells)
    return rows


def _csv_width(filepath: str, encoding: str) -> int:
    """Upper bound on the field count of any line; quoted commas only over-count."""
    with open(filepath, "r", encoding=encoding) as f:
        return max((line.rstrip("\r\n").count(",") + 1 for line in f), default=0)


def read_rows_robustly(filepath: str, **kwargs) -> Optional[List[List[str]]]:
    """
    Reads a CSV or Excel source document as a list of rows of strings.
    Returns None if the file cannot be read; the cause is logged.
    Extra kwargs go to pandas.read_csv or pandas.read_excel.
    """
    suffix = os.path.splitext(str(filepath))[1].lower()
    try:
        if suffix in EXCEL_SUFFIXES:
            df = pd.read_excel(
                filepath, header=None, dtype=str, keep_default_na=False, engine="openpyxl", **kwargs
            )
        else:
            # Source CSVs are ragged (title lines above the table), so every
            # column is named up front and short rows are padded
            width = _csv_width(filepath, kwargs.get("encoding", "utf-8"))
            df = pd.read_csv(
                filepath,
                header=None,
                names=range(width) if width else None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                **kwargs,
            )
    except FileNotFoundError:
        logger.error(f"File not found: {filepath}", exc_info=True)
        return None
    except pd.errors.EmptyDataError:
        logger.warning(f"Empty data: {filepath}")
        return []
    except pd.errors.ParserError as e:
        logger.error(f"Parser error in {filepath}: {e}", exc_info=True)
        return None
    except UnicodeDecodeError as e:
        logger.error(f"Unicode decode error in {filepath}: {e}", exc_info=True)
        return None
    except (ValueError, zipfile.BadZipFile) as e:
        # Raised by read_excel for files that are not valid workbooks
        logger.error(f"Could not read {filepath}: {e}", exc_info=True)
        return None

    rows = _frame_to_rows(df)
    logger.info(f"Read {len(rows)} row(s) from {filepath}")
    return rows
