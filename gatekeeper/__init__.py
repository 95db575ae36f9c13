"""
gatekeeper - authentication and access control for a multi-tenant
monitoring backend.
"""

__version__ = "0.1.0"
