"""
License file issuing.
"""

from .checkout import LicenseCheckoutService
from .envelope import EnvelopeBuilder
from .renderer import LicenseRenderer

__all__ = ["EnvelopeBuilder", "LicenseCheckoutService", "LicenseRenderer"]
