"""
Pixshop Studio: AI-assisted photo editing sessions
"""

__version__ = "0.1.0"

from .studio import Studio

__all__ = [
    "Studio",
]
