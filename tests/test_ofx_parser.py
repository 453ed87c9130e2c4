"""Tests for OFX statement parsing."""

import pytest
from datetime import date
from decimal import Decimal

from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import ParseError
from pocketledger.utils.ofx_parser import DEFAULT_DESCRIPTION, parse_ofx, parse_ofx_file


def test_parse_sgml_bank_statement(fixtures_dir):
    candidates = parse_ofx_file(fixtures_dir / "checking_statement.ofx")

    assert len(candidates) == 3
    first, second, third = candidates

    assert first.date == date(2024, 3, 5)
    assert first.amount == Decimal("45.90")
    assert first.type is TransactionType.EXPENSE
    assert first.description == "Supermarket Central & Co"
    assert first.fit_id == "202403050001"

    assert second.type is TransactionType.INCOME
    assert second.amount == Decimal("3500.00")
    assert second.description == "ACME PAYROLL"

    assert third.description == DEFAULT_DESCRIPTION
    assert third.date == date(2024, 3, 10)


def test_parse_xml_credit_card_statement(fixtures_dir):
    candidates = parse_ofx_file(fixtures_dir / "card_statement.ofx")

    assert [c.amount for c in candidates] == [Decimal("89.99"), Decimal("20.00")]
    assert [c.type for c in candidates] == [TransactionType.EXPENSE, TransactionType.INCOME]
    assert candidates[0].description == "NETFLIX.COM"
    assert candidates[1].description == "Refund"
    assert candidates[0].date == date(2024, 2, 15)


def test_parse_from_bytes(fixtures_dir):
    content = (fixtures_dir / "checking_statement.ofx").read_bytes()
    assert len(parse_ofx(content)) == 3


def test_zero_amount_rows_are_skipped(caplog):
    content = """
<OFX><BANKTRANLIST>
<STMTTRN>
<DTPOSTED>20240101
<TRNAMT>-45.90
<NAME>Bakery
</STMTTRN>
<STMTTRN>
<DTPOSTED>20240102
<TRNAMT>0.00
<NAME>Adjustment
</STMTTRN>
</BANKTRANLIST></OFX>
"""
    with caplog.at_level("WARNING", logger="pocketledger.utils.ofx_parser"):
        (row,) = parse_ofx(content)

    assert row.description == "Bakery"
    assert row.amount == Decimal("45.90")
    assert "#2" in caplog.text


def test_statement_with_only_zero_amounts():
    content = "<OFX><STMTTRN><DTPOSTED>20240101</DTPOSTED><TRNAMT>0.00</TRNAMT></STMTTRN></OFX>"
    with pytest.raises(ParseError, match="no transactions"):
        parse_ofx(content)


SGML_1252_STATEMENT = """OFXHEADER:100
DATA:OFXSGML
VERSION:102
ENCODING:USASCII
CHARSET:1252

<OFX><BANKTRANLIST>
<STMTTRN>
<DTPOSTED>20240105
<TRNAMT>-8.50
<MEMO>Padaria São João café
</STMTTRN>
</BANKTRANLIST></OFX>
"""


def test_declared_windows_1252_charset():
    (row,) = parse_ofx(SGML_1252_STATEMENT.encode("cp1252"))
    assert row.description == "Padaria São João café"


def test_undeclared_charset_falls_back_to_windows_1252():
    content = "<OFX><STMTTRN><DTPOSTED>20240105</DTPOSTED><TRNAMT>-3.00</TRNAMT><MEMO>Café Ñandú</MEMO></STMTTRN></OFX>"
    (row,) = parse_ofx(content.encode("cp1252"))
    assert row.description == "Café Ñandú"


def test_xml_declared_encoding():
    content = (
        '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
        "<OFX><STMTTRN><DTPOSTED>20240105</DTPOSTED><TRNAMT>12.00</TRNAMT>"
        "<NAME>Reembolso Açaí</NAME></STMTTRN></OFX>"
    )
    (row,) = parse_ofx(content.encode("latin-1"))
    assert row.description == "Reembolso Açaí"
    assert row.type is TransactionType.INCOME


def test_utf8_statement_without_declaration():
    content = "<OFX><STMTTRN><DTPOSTED>20240105</DTPOSTED><TRNAMT>-3.00</TRNAMT><MEMO>Café</MEMO></STMTTRN></OFX>"
    (row,) = parse_ofx(content.encode("utf-8"))
    assert row.description == "Café"


def test_missing_ofx_root(fixtures_dir):
    with pytest.raises(ParseError):
        parse_ofx_file(fixtures_dir / "not_a_statement.ofx")


def test_statement_without_transactions(fixtures_dir):
    with pytest.raises(ParseError, match="no transactions"):
        parse_ofx_file(fixtures_dir / "empty_statement.ofx")


def test_invalid_row_aborts_whole_statement():
    content = """
<OFX><BANKTRANLIST>
<STMTTRN>
<DTPOSTED>20240101
<TRNAMT>-10.00
</STMTTRN>
<STMTTRN>
<DTPOSTED>2024
<TRNAMT>-5.00
</STMTTRN>
</BANKTRANLIST></OFX>
"""
    with pytest.raises(ParseError, match="#2"):
        parse_ofx(content)


def test_missing_amount_rejected():
    content = "<OFX><STMTTRN><DTPOSTED>20240101</DTPOSTED></STMTTRN></OFX>"
    with pytest.raises(ParseError):
        parse_ofx(content)


def test_unreadable_file(tmp_path):
    with pytest.raises(ParseError):
        parse_ofx_file(tmp_path / "missing.ofx")
