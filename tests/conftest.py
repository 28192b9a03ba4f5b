# Purpose: Shared pytest fixtures for the gilts test suite.
# Puts the project root on sys.path and provides sample source rows.

# Add project root to sys.path for module imports
import os, sys
import pytest
from datetime import date

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.settings_loader import reload_settings  # noqa: E402

TG25_ISIN = "GB00BL68HJ26"
TS28_ISIN = "GB00BMBL1G81"


def dmo_row(isin, desc, clean, dirty, maturity):
    """DMO D10B row: ISIN, description, clean, dirty, 3 unused cells, maturity."""
    return [isin, desc, clean, dirty, "", "", "", maturity]


@pytest.fixture
def settlement_date():
    return date(2025, 3, 20)


@pytest.fixture
def dmo_rows():
    """A DMO table with title/header lines, two good gilts, one index-linked, one bad and a footer."""
    return [
        ["Gilts in Issue - D10B"],
        ["ISIN Code", "Instrument Name", "Clean Price", "Dirty Price", "", "", "", "Redemption Date"],
        dmo_row(TG25_ISIN, "0 5/8% Treasury Gilt 2025", "99.28", "99.45", "07-Jun-2025"),
        dmo_row(TS28_ISIN, "4½% Treasury Gilt 2028", "100.9", "", "07-Jun-2028"),
        dmo_row("GB00B3MYD345", "0 1/8% Index-linked Treasury Gilt 2026", "99.1", "99.2", "22-Mar-2026"),
        dmo_row("GB00BNNGP668", "1% Treasury Gilt 2032", "not-a-price", "", "31-Jan-2032"),
        [],
        ["Source: UK Debt Management Office"],
    ]


@pytest.fixture
def dividend_rows():
    """DividendData table: ticker, desc, coupon, maturity, duration, price, yield."""
    return [
        ["Last updated: 20/03/2025"],
        ["TG25", "Treasury 0.625% 2025", "0.625%", "07-Jun-2025", "0.2", "Â£99.28", "0%"],
        ["TS28", "Treasury 4.5% 2028", "4.5%", "07-Jun-2028", "3.0", "£100.90", "4.2%"],
    ]


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """Point the settings loader at a throwaway settings.yaml; returns a writer."""
    path = tmp_path / "settings.yaml"
    writes = [0]

    def write(text: str):
        path.write_text(text, encoding="utf-8")
        # Make sure the mtime moves even on coarse-grained filesystems
        writes[0] += 1
        stamp = 1_700_000_000 + writes[0]
        os.utime(path, (stamp, stamp))
        return path

    write("{}\n")
    monkeypatch.setenv("GILTS_SETTINGS_FILE", str(path))
    reload_settings()
    yield write
    reload_settings()
