"""Input-layer public API for key decoding and mode dispatch.

Exports are split between low-level terminal decoding (`read_key`) and the
viewer's keystroke transition function (`apply_key`).
"""

from .dispatch import KeyOutcome, apply_key, handle_normal_key, handle_search_entry_key
from .key_registry import KeyComboBinding, KeyComboRegistry
from .reader import ESC_SEQUENCE_TIMEOUT_MS, _PENDING_BYTES, read_key

__all__ = [
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "KeyOutcome",
    "apply_key",
    "handle_normal_key",
    "handle_search_entry_key",
]
