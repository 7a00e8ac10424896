# utils/batch_names.py
import re
from datetime import datetime
from typing import Iterable, Optional, Tuple

BATCH_NAME_RE = re.compile(r"^BATCH-(\d{4})(\d{2})-(\d{2})$")


def format_batch_name(year: int | str, month: int | str, number: int | str = 1) -> str:
    """
    Example: (2024, 3, 2) -> "BATCH-202403-02"
    """
    return f"BATCH-{int(year):04d}{int(month):02d}-{int(number):02d}"


def parse_batch_name(name: str) -> Optional[Tuple[str, str, str]]:
    """
    Split a conventional batch name into (year, month, number).
    Returns None for names that don't follow BATCH-YYYYMM-NN.
    """
    match = BATCH_NAME_RE.match((name or "").strip())
    if not match:
        return None
    return match.group(1), match.group(2), match.group(3)


def latest_batch_name(names: Iterable[str]) -> Optional[str]:
    ordered = sorted({n for n in names if n}, reverse=True)
    return ordered[0] if ordered else None


def current_batch_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return format_batch_name(now.year, now.month, 1)
