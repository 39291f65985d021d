"""Value cleaning for spreadsheet cells"""
from datetime import datetime, date, timezone
from dateutil import parser
from typing import Any, Optional
import math
import re
from app.schemas.job_schema import clamp_percent


class DataNormalizer:
    """Normalizes raw cell values read from imported spreadsheets"""

    @staticmethod
    def is_blank(value: Any) -> bool:
        """None, NaN/NaT and whitespace-only strings count as empty cells"""
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        if isinstance(value, str):
            return not value.strip()
        # pandas.NaT is a datetime subclass that never equals itself
        if isinstance(value, datetime) and value != value:
            return True
        return False

    @staticmethod
    def normalize_text(value: Any) -> Optional[str]:
        if DataNormalizer.is_blank(value):
            return None

        # Excel stores numeric ids like 1001 as floats
        if isinstance(value, float) and value.is_integer():
            value = int(value)

        text = str(value).strip()
        return re.sub(r'\s+', ' ', text)

    @staticmethod
    def normalize_date(date_value: Any) -> Optional[datetime]:
        """Parse a cell into an aware datetime; naive values are taken as UTC"""
        if DataNormalizer.is_blank(date_value):
            return None

        if isinstance(date_value, datetime):
            parsed = date_value
        elif isinstance(date_value, date):
            parsed = datetime(date_value.year, date_value.month, date_value.day)
        elif isinstance(date_value, str):
            try:
                parsed = parser.parse(date_value)
            except (ValueError, OverflowError):
                return None
        else:
            return None

        # pandas.Timestamp -> plain datetime
        if hasattr(parsed, "to_pydatetime"):
            parsed = parsed.to_pydatetime()

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def normalize_percent(value: Any) -> Optional[int]:
        """
        Parse 45, 45.4, "45" or "45%" into an int clamped to [0, 100].
        Returns None when the cell is empty or not a number.
        """
        if DataNormalizer.is_blank(value) or isinstance(value, bool):
            return None

        if isinstance(value, str):
            value = value.strip().rstrip('%').strip()

        try:
            number = float(value)
        except (TypeError, ValueError):
            return None

        if not math.isfinite(number):
            return None
        return clamp_percent(number)

    @staticmethod
    def normalize_choice(value: Any) -> Optional[str]:
        """Lower-case an enumeration value; "In Progress" becomes "in-progress" """
        text = DataNormalizer.normalize_text(value)
        if text is None:
            return None
        return re.sub(r'[\s_]+', '-', text.lower())
