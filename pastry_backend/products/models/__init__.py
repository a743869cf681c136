"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import UNCATEGORIZED_LABEL, Product

__all__ = [
    "Product",
    "UNCATEGORIZED_LABEL",
]
