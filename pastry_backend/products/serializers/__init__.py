from .product import ProductSerializer, ProductWriteSerializer

__all__ = ["ProductSerializer", "ProductWriteSerializer"]
