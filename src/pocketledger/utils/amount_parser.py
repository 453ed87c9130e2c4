"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45", "+123.45"
    - "$123.45", "R$ 123,45", "-€12.00"
    - "1,234.56" and "1.234,56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount (sign preserved)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValueError("Empty amount string")

    original = str(amount_str).strip()
    text = original

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    # Currency symbols and codes
    text = re.sub(r"[$€£¥]|R\$|\s", "", text)

    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:]
    elif text.startswith("+"):
        text = text[1:]

    # Decide which separator is decimal: the right-most of "." and ","
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        head, _, tail = text.rpartition(",")
        if len(tail) == 3 and head:
            text = text.replace(",", "")
        else:
            text = head.replace(",", "") + "." + tail

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{original}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{original}'")
    return -amount if is_negative else amount
