"""Spanish ordinal rendering of edition numbers ("3ra" for the 3rd edition)."""

from typing import Any, Dict, Optional

MIN_ORDINAL_EDITION = 1
MAX_ORDINAL_EDITION = 30

_ORDINALS: Dict[int, str] = {
    1: "1ra", 2: "2da", 3: "3ra", 4: "4ta", 5: "5ta",
    6: "6ta", 7: "7ma", 8: "8va", 9: "9na", 10: "10ma",
    11: "11va", 12: "12va", 13: "13ra", 14: "14ta", 15: "15ta",
    16: "16ta", 17: "17ma", 18: "18va", 19: "19na", 20: "20ma",
    21: "21ra", 22: "22da", 23: "23ra", 24: "24ta", 25: "25ta",
    26: "26ta", 27: "27ma", 28: "28va", 29: "29na", 30: "30ma",
}


def number_to_ordinal(number: Any) -> Optional[str]:
    """Returns the ordinal for 1..30, or None for anything else (bools included)."""
    if isinstance(number, bool) or not isinstance(number, int):
        return None
    if not MIN_ORDINAL_EDITION <= number <= MAX_ORDINAL_EDITION:
        return None
    return _ORDINALS[number]


def format_edition(edition: Any) -> str:
    """Ordinal when one exists, otherwise the raw edition value as text."""
    ordinal = number_to_ordinal(edition)
    if ordinal is not None:
        return ordinal
    return "" if edition is None else str(edition)
