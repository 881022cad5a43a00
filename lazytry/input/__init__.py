"""Input-layer public API for key decoding and dispatch tables."""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .reader import ESC_SEQUENCE_TIMEOUT_MS, UNKNOWN_KEY, read_key


def is_printable(key: str) -> bool:
    """Only single ASCII characters 32..126 may enter a text buffer."""
    return len(key) == 1 and 32 <= ord(key) <= 126


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "UNKNOWN_KEY",
    "is_printable",
    "read_key",
]
