"""
Action controllers.

Every mutating API operation goes through a controller: permission
check, validation, store call, typed error.
"""

from gatekeeper.actions.controller import ActionController
from gatekeeper.actions.errors import ActionError, ErrorCode, new_error
from gatekeeper.actions.organizations import OrganizationsController

__all__ = [
    "ActionController",
    "ActionError",
    "ErrorCode",
    "new_error",
    "OrganizationsController",
]
