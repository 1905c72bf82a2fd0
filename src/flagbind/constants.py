#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for flagbind.

Constants are organized by category:
1. Field Metadata Keys - keys read from dataclass field metadata
2. Attribute Tokens - tokens recognized in the attribute list
3. Numeric Limits - ranges of the bounded widths
4. Token Forms - accepted boolean spellings and separators
"""

from __future__ import annotations

# =============================================================================
# Field Metadata Keys
# =============================================================================

DEFAULT_NAME_KEY = "name"
DEFAULT_SHORTHAND_KEY = "shorthand"
DEFAULT_USAGE_KEY = "usage"
DEFAULT_ATTRS_KEY = "flagbind"

DEFAULT_SKIP_PRIVATE = True

# =============================================================================
# Attribute Tokens
# =============================================================================

PERSISTENT_ATTRS = frozenset({"persistent", "persist", "p"})
REQUIRED_ATTRS = frozenset({"required", "require", "r"})

# Characters separating tokens in the attribute list
ATTR_SEPARATORS = (",", " ")

# =============================================================================
# Numeric Limits
# =============================================================================

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

MAX_FLOAT32 = 3.4028234663852886e38

# =============================================================================
# Token Forms
# =============================================================================

TRUE_TOKENS = frozenset({"1", "t", "true", "y", "yes", "on"})
FALSE_TOKENS = frozenset({"0", "f", "false", "n", "no", "off"})

KEY_VALUE_SEPARATOR = "="
