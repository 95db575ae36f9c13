"""
Core module - fundamental data models and helpers.

This module contains:
- models: Records managed by the action controllers (Organization)
- utils: Shared utility functions
"""

from gatekeeper.core.models import (
    Organization,
    validate_name,
)

from gatekeeper.core.utils import (
    generate_token_id,
    random_bytes,
    utc_now,
)

__all__ = [
    # Models
    "Organization",
    "validate_name",
    # Utils
    "generate_token_id",
    "random_bytes",
    "utc_now",
]
