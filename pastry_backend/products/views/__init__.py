from .category import ProductCategoriesView
from .product import ProductCollectionView, ProductDetailView

__all__ = [
    "ProductCollectionView",
    "ProductDetailView",
    "ProductCategoriesView",
]
