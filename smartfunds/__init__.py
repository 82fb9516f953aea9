"""
SmartFunds Mission Engine - compliance lifecycle tracking for fundraising missions.

A mission is a regulated offering that moves through a fixed review
lifecycle, from intake through legal structuring, composition and
verification to launch and archival. Every state change is recorded in an
append-only audit ledger whose timestamps are strictly ordered.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
