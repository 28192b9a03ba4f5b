# Purpose: Tests for row parsing: coupon descriptions, prices, dates and the
# per-row diagnostics collected while parsing.

from datetime import date

import pytest

from gilts.errors import BondError, ErrorKind
from gilts.models import BondState
from gilts.parsing import (
    FieldDiagnostics,
    parse_coupon_percentage,
    parse_maturity_date,
    parse_price,
    parse_row,
)
from gilts.sources import get_layout

from conftest import TG25_ISIN, dmo_row


@pytest.mark.parametrize(
    "desc, expected",
    [
        ("0 5/8% Treasury Gilt 2025", 0.625),
        ("2% Treasury Gilt 2025", 2.0),
        ("4.25% Treasury Gilt 2055", 4.25),
        ("3½% Treasury Gilt 2025", 3.5),
        ("4¼% Treasury Stock 2036", 4.25),
        ("1¾% Treasury Gilt 2037", 1.75),
        ("5/8% Treasury Gilt 2025", 0.625),
        ("1 1/2% Treasury Gilt 2026", 1.5),
    ],
)
def test_parse_coupon_percentage(desc, expected):
    assert parse_coupon_percentage(desc) == pytest.approx(expected)


def test_half_glyph_equals_decimal_form():
    assert parse_coupon_percentage("3½% Treasury Gilt 2025") == parse_coupon_percentage("3.5% Treasury Gilt 2025")


@pytest.mark.parametrize("desc", ["Treasury Gilt 2025", "", "% Treasury", "1 1/0% Treasury Gilt 2030"])
def test_parse_coupon_percentage_rejects(desc):
    with pytest.raises(BondError) as exc_info:
        parse_coupon_percentage(desc)
    assert exc_info.value.kind is ErrorKind.INVALID_COUPON


@pytest.mark.parametrize(
    "text, expected",
    [
        ("99.28", 99.28),
        (" 101.5 ", 101.5),
        ("£100.90", 100.9),
        ("Â£99.28", 99.28),
        ("4.2%", 4.2),
        ("0", None),
        ("0%", None),
        ("", None),
        ("  ", None),
    ],
)
def test_parse_price(text, expected):
    assert parse_price(text, ErrorKind.INVALID_CLEAN_PRICE) == (pytest.approx(expected) if expected else None)


@pytest.mark.parametrize("text", ["abc", "-1.5", "nan", "inf", "£"])
def test_parse_price_rejects(text):
    with pytest.raises(BondError) as exc_info:
        parse_price(text, ErrorKind.INVALID_DIRTY_PRICE, "dirty_price")
    assert exc_info.value.kind is ErrorKind.INVALID_DIRTY_PRICE
    assert exc_info.value.field == "dirty_price"


def test_parse_maturity_date():
    assert parse_maturity_date("07-Sep-2025") == date(2025, 9, 7)
    assert parse_maturity_date(" 31-Jan-2032 ") == date(2032, 1, 31)
    with pytest.raises(BondError) as exc_info:
        parse_maturity_date("2025-09-07")
    assert exc_info.value.kind is ErrorKind.INVALID_MATURITY_DATE


def test_parse_dmo_row(settlement_date):
    row = dmo_row(TG25_ISIN, "0 5/8% Treasury Gilt 2025", "99.28", "99.45", "07-Jun-2025")
    parsed = parse_row(row, settlement_date, get_layout("DMO"), row_index=2)

    assert parsed.ok
    assert parsed.error is None
    bond = parsed.bond
    assert bond.state is BondState.PARSED
    assert bond.source == "DMO"
    assert bond.isin == TG25_ISIN
    assert bond.ticker is None
    assert bond.coupon == pytest.approx(0.625)
    assert bond.clean_price == pytest.approx(99.28)
    assert bond.dirty_price == pytest.approx(99.45)
    assert bond.maturity_date == date(2025, 6, 7)
    assert bond.settlement_date == settlement_date


def test_parse_dividend_data_row(settlement_date):
    row = ["TS28", "Treasury 4.5% 2028", "4.5%", "07-Jun-2028", "3.0", "Â£100.90", "4.2%"]
    parsed = parse_row(row, settlement_date, get_layout("DividendData"))

    assert parsed.ok
    bond = parsed.bond
    assert bond.ticker == "TS28"
    assert bond.isin is None
    assert bond.coupon == pytest.approx(4.5)
    assert bond.clean_price == pytest.approx(100.9)
    assert bond.dirty_price is None
    assert bond.yield_to_maturity == pytest.approx(4.2)


@pytest.mark.parametrize(
    "row",
    [
        [],
        ["Gilts in Issue - D10B"],
        ["ISIN Code", "Instrument Name", "Clean Price", "Dirty Price", "", "", "", "Redemption Date"],
    ],
)
def test_non_data_rows_are_invalid(row, settlement_date):
    with pytest.raises(BondError) as exc_info:
        parse_row(row, settlement_date, get_layout("DMO"), row_index=0)
    assert exc_info.value.kind is ErrorKind.INVALID_ROW


@pytest.mark.parametrize(
    "desc",
    [
        "0 1/8% Index-linked Treasury Gilt 2026",
        "0 1/8% INDEX-LINKED Treasury Gilt 2026",
        "0 1/8% index-linked Treasury Gilt 2026",
    ],
)
def test_index_linked_is_unsupported(desc, settlement_date):
    row = dmo_row("GB00B3MYD345", desc, "99.1", "99.2", "22-Mar-2026")
    with pytest.raises(BondError) as exc_info:
        parse_row(row, settlement_date, get_layout("DMO"))
    assert exc_info.value.kind is ErrorKind.UNSUPPORTED_BOND


def test_every_bad_field_is_recorded_and_first_wins(settlement_date):
    row = dmo_row(TG25_ISIN, "Treasury Gilt 2025", "abc", "99.45", "not a date")
    parsed = parse_row(row, settlement_date, get_layout("DMO"), row_index=5)

    assert not parsed.ok
    kinds = [d.kind for d in parsed.diagnostics.items]
    assert kinds == [ErrorKind.INVALID_COUPON, ErrorKind.INVALID_CLEAN_PRICE, ErrorKind.INVALID_MATURITY_DATE]
    assert parsed.error.kind is ErrorKind.INVALID_COUPON
    assert parsed.error.row_index == 5
    # Fields that did parse are kept on the provisional bond
    assert parsed.bond.dirty_price == pytest.approx(99.45)


def test_empty_ticker_is_reported(settlement_date):
    row = ["", "Treasury 4.5% 2028", "4.5%", "07-Jun-2028", "3.0", "100.90", "4.2%"]
    parsed = parse_row(row, settlement_date, get_layout("DividendData"))
    assert parsed.error.kind is ErrorKind.INVALID_TICKER


def test_field_diagnostics_builder():
    diagnostics = FieldDiagnostics()
    assert diagnostics.ok and diagnostics.first is None
    diagnostics.raise_first()  # nothing recorded, nothing raised

    diagnostics.record(ErrorKind.INVALID_ISIN, "isin")
    diagnostics.record(ErrorKind.INVALID_DESC, "desc")
    assert not diagnostics.ok
    assert len(diagnostics) == 2
    with pytest.raises(BondError) as exc_info:
        diagnostics.raise_first(row_index=9)
    assert exc_info.value.kind is ErrorKind.INVALID_ISIN
    assert exc_info.value.row_index == 9
