from .orders import OrderCollectionView

__all__ = ["OrderCollectionView"]
