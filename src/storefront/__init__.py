"""
Storefront cart engine.

Offer-aware cart pricing and optimistic quantity reconciliation against the
storefront REST API.
"""

__version__ = "0.1.0"
