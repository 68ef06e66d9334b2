"""Core services for Converslation.

This package contains the shared data container and the preference, cache and translation services.
"""

from core.shared_data import SharedData
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "SharedData",
]
