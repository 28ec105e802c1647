"""
Column layout of the stock table.

The dashboard renders and edits records only through these descriptors,
in this order; fields not listed here (``id``, ``ownerId``) are never shown.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable


def parse_int(value: Any) -> int:
    if isinstance(value, str):
        value = value.strip()
    number = int(value)
    if number < 0:
        raise ValueError("must not be negative")
    return number


def parse_price(value: Any) -> float:
    if isinstance(value, str):
        value = value.strip()
    number = float(value)
    if number < 0:
        raise ValueError("must not be negative")
    return number


def parse_text(value: Any) -> str:
    return str(value).strip()


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO timestamp as sent by the API (a trailing Z means UTC)."""
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_timestamp(value: Any) -> str:
    if not value:
        return ""
    return parse_timestamp(value).strftime("%Y-%m-%d %H:%M")


def format_plain(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Column:
    field: str
    label: str
    editable: bool
    parse: Callable[[Any], Any] = parse_text
    display: Callable[[Any], str] = format_plain


COLUMNS: tuple[Column, ...] = (
    Column("itemName", "Item Name", True, parse_text),
    Column("quantityReceived", "Quantity Received", True, parse_int),
    Column("quantitySold", "Quantity Sold", True, parse_int),
    Column("unitPrice", "Unit Price", True, parse_price),
    Column("sellingPrice", "Selling Price", True, parse_price),
    Column("week", "Week", False, parse_int),
    Column("year", "Year", False, parse_int),
    Column("createdAt", "Created At", False, display=format_timestamp),
    Column("updatedAt", "Updated At", False, display=format_timestamp),
)

COLUMNS_BY_FIELD = {column.field: column for column in COLUMNS}

# Fields the add-row form asks for; week and year are filled in automatically.
NEW_ROW_FIELDS = ("itemName", "quantityReceived", "unitPrice", "sellingPrice")


def column_for(field: str) -> Column:
    try:
        return COLUMNS_BY_FIELD[field]
    except KeyError:
        raise ValueError(f"Unknown column: {field}") from None
