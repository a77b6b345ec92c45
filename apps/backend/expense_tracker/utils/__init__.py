"""
Utils package
"""

from .normalization import normalize_description, normalize_label

__all__ = [
    "normalize_description",
    "normalize_label",
]
