"""HTTP surface for gatekeeper."""
