"""
Cell value helpers shared by the upload validators and importers.

Spreadsheet cells arrive as strings, numbers or dates depending on the
source (CSV vs Excel); these helpers normalise them.
"""

import re
from datetime import date, datetime, timedelta
from typing import Any

_MONTHS = {
    m: i
    for i, m in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}
_MONTH_ABBR = [m.capitalize() for m in _MONTHS]

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_MON_RE = re.compile(r"^(\d{1,2})[-\s]([A-Za-z]{3})[A-Za-z]*[-\s](\d{2}|\d{4})$")
_NUMERIC_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_YEAR_RE = re.compile(r"(\d{4})")

# Excel serial dates count days from 1899-12-30
_EXCEL_EPOCH = date(1899, 12, 30)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_number(value: Any) -> float | None:
    """
    Parse a numeric cell.

    Strips thousands separators, currency symbols and percent signs.
    Returns None for blanks and unparseable text.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    cleaned = re.sub(r"[^0-9.\-eE]", "", text.replace(",", ""))
    if not cleaned or cleaned in {"-", ".", "-."}:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def is_number(value: Any) -> bool:
    """Strict check: the whole cell must be a number once separators are removed."""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip().replace(",", "")
    if not text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def parse_percentage(value: Any) -> float | None:
    """
    Parse a percentage cell into the 0..100 scale.

    "45%" -> 45.0; 0.45 -> 45.0 (fractions are scaled); 45 -> 45.0.
    """
    if is_blank(value):
        return None
    text = str(value).strip()
    has_sign = text.endswith("%")
    number = parse_number(text.rstrip("%"))
    if number is None:
        return None
    if not has_sign and 0 < number <= 1:
        return number * 100
    return number


def parse_date(value: Any) -> date | None:
    """
    Parse the date formats found in game plan sheets.

    Accepts ISO ``YYYY-MM-DD``, ``DD-Mon-YY(YY)``, ``DD/MM/YYYY``,
    ``DD-MM-YYYY``, Excel serial numbers and date objects.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int | float):
        return _from_serial(float(value))

    text = str(value).strip()
    if not text:
        return None

    try:
        m = _ISO_RE.match(text)
        if m:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

        m = _MON_RE.match(text)
        if m:
            month = _MONTHS.get(m.group(2).lower())
            if month is None:
                return None
            year = int(m.group(3))
            if year < 100:
                year += 2000
            return date(year, month, int(m.group(1)))

        m = _NUMERIC_RE.match(text)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    except ValueError:
        return None

    if re.fullmatch(r"\d+(\.\d+)?", text):
        return _from_serial(float(text))
    return None


def _from_serial(serial: float) -> date | None:
    # Plausible range: 1954..2173
    if serial < 20000 or serial > 100000:
        return None
    return _EXCEL_EPOCH + timedelta(days=int(serial))


def to_iso_date(value: Any) -> str | None:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def format_date(value: date | datetime) -> str:
    """Format as ``DD-Mon-YYYY`` (e.g. 05-Jan-2025)."""
    return f"{value.day:02d}-{_MONTH_ABBR[value.month - 1]}-{value.year}"


def extract_year(text: str | None) -> int | None:
    """First four-digit number in ``text`` (e.g. "ABP 2025" -> 2025)."""
    if not text:
        return None
    m = _YEAR_RE.search(text)
    return int(m.group(1)) if m else None


def normalise_key(value: Any) -> str:
    return str(value or "").strip().lower()


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_reach(value: Any) -> float | None:
    """
    Reach as a fraction in 0..1.

    Values above 1 are read as percentages; anything above 100 is capped.
    """
    number = parse_number(value)
    if number is None:
        return None
    if number > 1:
        return number / 100 if number <= 100 else 1.0
    return number
