"""
Core data models for gatekeeper.

Records managed through the action controllers. Only the fields relevant
to authorization are validated here.
"""

from __future__ import annotations

import re

from pydantic import BaseModel


# Shared by every named resource (organizations, assets, ...)
NAME_REGEX_STR = r"[a-z0-9\/\_\.\-]+"
NAME_REGEX = re.compile("^" + NAME_REGEX_STR + "$")


def validate_name(name: str) -> None:
    """
    Validate a resource name.

    Raises:
        ValueError: The name is empty or contains forbidden characters
    """
    if not name:
        raise ValueError("name cannot be empty")

    if not NAME_REGEX.match(name):
        raise ValueError(
            "name must be lowercase and may only contain forward slashes, "
            "underscores, dashes and numbers"
        )


# =============================================================================
# Organization
# =============================================================================


class Organization(BaseModel):
    """A tenant. Uniquely identified by its name."""

    name: str
    description: str = ""

    def validate_fields(self) -> None:
        """Raise ValueError if the organization contains invalid values."""
        validate_name(self.name)
