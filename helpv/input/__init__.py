"""Input-layer public API for key decoding and paging-mode bindings.

``read_key`` decodes terminal bytes; ``KeyHandler`` maps the resulting key
names to paging actions.
"""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keymap import Action, KeyHandler, normalize_key_name
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "read_key",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "Action",
    "KeyComboBinding",
    "KeyComboRegistry",
    "KeyHandler",
    "normalize_key_name",
]
