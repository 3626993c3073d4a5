"""Parsing of human-readable sizes printed by CLI tools.

docker prints "1.234GB" (decimal units), journalctl prints "1.2G" or
"56.0M" (binary units). Both are accepted.
"""

import re

_SIZE_RE = re.compile(r"^\s*([0-9]+(?:\.[0-9]+)?)\s*([A-Za-z]*)\s*$")

_MULTIPLIERS = {
    "": 1,
    "B": 1,
    "K": 1024,
    "KB": 1000,
    "KIB": 1024,
    "M": 1024**2,
    "MB": 1000**2,
    "MIB": 1024**2,
    "G": 1024**3,
    "GB": 1000**3,
    "GIB": 1024**3,
    "T": 1024**4,
    "TB": 1000**4,
    "TIB": 1024**4,
}


def parse_size(text: str) -> int:
    """Parse a size string like '1.5GB', '56.0M' or '0B' into bytes.

    Raises:
        ValueError: If the string is not a recognised size.
    """
    match = _SIZE_RE.match(text)
    if not match:
        raise ValueError(f"Not a size: {text!r}")
    number, suffix = match.groups()
    multiplier = _MULTIPLIERS.get(suffix.upper())
    if multiplier is None:
        raise ValueError(f"Unknown size unit {suffix!r} in {text!r}")
    return int(float(number) * multiplier)


def bytes_to_gb(num_bytes: float) -> float:
    """Convert bytes to GiB, rounded to two decimals."""
    return round(num_bytes / 1024**3, 2)


def bytes_to_mb(num_bytes: float) -> float:
    """Convert bytes to MiB, rounded to one decimal."""
    return round(num_bytes / 1024**2, 1)
