"""OFX bank statement parsing.

Handles OFX 1.x (SGML, unclosed leaf tags) and OFX 2.x (XML) statements for
both bank and credit-card accounts. A statement either parses completely or
raises ParseError; no partial candidate list is ever returned.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from pocketledger.domain.entities import OfxCandidate, TransactionType
from pocketledger.domain.errors import ParseError
from pocketledger.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Imported transaction"

# Leaf elements look like "<TRNAMT>-45.90" in SGML statements; leaves that
# already carry their closing tag are left alone.
_LEAF_TAG = re.compile(
    r"<([A-Za-z0-9_.]+)>([^<\r\n]*[^<\s][^<\r\n]*)(?=<(?!/\1>)|\r|\n|$)"
)
_UNESCAPED_AMP = re.compile(r"&(?!(amp|lt|gt|apos|quot|#\d+);)")

# OFX 1.x headers declare "CHARSET:1252" and "ENCODING:UTF-8"; OFX 2.x uses
# the XML declaration.
_XML_ENCODING = re.compile(rb"<\?xml[^>]*encoding\s*=\s*[\"']([A-Za-z0-9_.:-]+)[\"']", re.IGNORECASE)
_SGML_ENCODING = re.compile(rb"^\s*ENCODING:\s*([A-Za-z0-9_-]+)", re.IGNORECASE | re.MULTILINE)
_SGML_CHARSET = re.compile(rb"^\s*CHARSET:\s*([A-Za-z0-9_-]+)", re.IGNORECASE | re.MULTILINE)
FALLBACK_ENCODING = "cp1252"


def _sgml_to_xml(content: str) -> str:
    """Close SGML leaf tags so ElementTree can read the statement."""

    def close(match: re.Match) -> str:
        tag, value = match.group(1), match.group(2).strip()
        return f"<{tag}>{value}</{tag}>"

    return _LEAF_TAG.sub(close, content)


def _declared_encoding(header: bytes) -> Optional[str]:
    match = _XML_ENCODING.search(header)
    if match:
        return match.group(1).decode("ascii")

    encoding = _SGML_ENCODING.search(header)
    if encoding and encoding.group(1).upper().replace(b"-", b"") == b"UTF8":
        return "utf-8"
    charset = _SGML_CHARSET.search(header)
    if charset:
        value = charset.group(1).decode("ascii")
        if value.isdigit():
            return f"cp{value}"
        if value.upper() != "NONE":
            return value
    return None


def _decode(data: bytes) -> str:
    """Decode statement bytes using the declared charset.

    Undeclared or wrongly declared statements are tried as UTF-8 and then
    as Windows-1252, which most banks use for OFX 1.x files.
    """
    start = data.upper().find(b"<OFX>")
    header = data[:start] if start >= 0 else data[:1024]
    tried = []
    for encoding in (_declared_encoding(header), "utf-8-sig"):
        if encoding is None or encoding in tried:
            continue
        tried.append(encoding)
        try:
            return data.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            logger.debug("Statement is not valid %s", encoding)
    return data.decode(FALLBACK_ENCODING, errors="replace")


def _load_root(content: str) -> ET.Element:
    start = content.upper().find("<OFX>")
    if start < 0:
        raise ParseError("Invalid OFX file: no <OFX> element found")
    body = _UNESCAPED_AMP.sub("&amp;", content[start:])

    for candidate in (body, _sgml_to_xml(body)):
        try:
            return ET.fromstring(candidate)
        except ET.ParseError:
            continue
    raise ParseError("Invalid OFX file: statement structure could not be read")


def _parse_ofx_date(raw: str) -> date:
    """Parse DTPOSTED values such as 20240115 or 20240115120000[-3:BRT]."""
    digits = raw.strip()[:8]
    if len(digits) != 8 or not digits.isdigit():
        raise ValueError(f"invalid date '{raw}'")
    return date(int(digits[:4]), int(digits[4:6]), int(digits[6:8]))


def _text(element: ET.Element, tag: str) -> str:
    found = element.find(tag)
    if found is None or found.text is None:
        return ""
    return found.text.strip()


def parse_ofx(content: Union[str, bytes]) -> list[OfxCandidate]:
    """Parse an OFX statement into reconciliation candidates.

    Rows with a zero amount carry no money movement and are skipped.

    Args:
        content: Raw statement text or bytes

    Returns:
        Candidates in statement order

    Raises:
        ParseError: If the statement is malformed or contains no transactions
            with a non-zero amount
    """
    if isinstance(content, bytes):
        content = _decode(content)

    root = _load_root(content)
    statement_rows = list(root.iter("STMTTRN"))
    if not statement_rows:
        raise ParseError("OFX file contains no transactions")

    candidates = []
    for position, row in enumerate(statement_rows, start=1):
        try:
            signed = parse_amount(_text(row, "TRNAMT"))
            posted = _parse_ofx_date(_text(row, "DTPOSTED"))
        except ValueError as e:
            raise ParseError(f"Invalid OFX transaction #{position}: {e}")

        amount = abs(signed).quantize(Decimal("0.01"))
        if amount == 0:
            logger.warning("Skipping OFX transaction #%d: zero amount", position)
            continue

        description = _text(row, "MEMO") or _text(row, "NAME") or DEFAULT_DESCRIPTION
        candidates.append(
            OfxCandidate(
                date=posted,
                amount=amount,
                type=TransactionType.INCOME if signed > 0 else TransactionType.EXPENSE,
                description=description,
                fit_id=_text(row, "FITID") or None,
            )
        )

    if not candidates:
        raise ParseError("OFX file contains no transactions with a non-zero amount")

    logger.debug("Parsed %d OFX transactions", len(candidates))
    return candidates


def parse_ofx_file(path: Union[str, Path]) -> list[OfxCandidate]:
    """Read and parse an OFX statement file.

    Raises:
        ParseError: If the file cannot be read or parsed
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ParseError(f"Could not read statement file '{path}': {e}")
    return parse_ofx(data)
