"""Parsing helpers for command-line input and bank statements."""

from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date
from pocketledger.utils.ofx_parser import parse_ofx, parse_ofx_file

__all__ = ["parse_amount", "parse_date", "parse_ofx", "parse_ofx_file"]
