"""
Shared utility functions for gatekeeper.

This module contains common utilities used across the codebase.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone


def random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        The random bytes (from the OS CSPRNG)
    """
    return secrets.token_bytes(length)


def generate_token_id(length: int = 16) -> str:
    """Generate a hex-encoded random token identifier."""
    return random_bytes(length).hex()


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
