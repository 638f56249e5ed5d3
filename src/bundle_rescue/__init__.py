"""
Bundle Rescue package.

Moves assets out of a compromised account through a sponsored,
privately relayed transaction bundle.
"""

from .config import RescueConfig
from .models import BundleResolution, TransactionIntent
from .rescuer import BundleRescuer

__all__ = ["RescueConfig", "BundleRescuer", "BundleResolution", "TransactionIntent"]
__version__ = "0.1.0"
