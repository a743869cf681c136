# products/urls.py

"""
PRODUCTS URLS

Mounted under /api/products/
"""

from django.urls import path

from products.views import ProductCategoriesView, ProductCollectionView, ProductDetailView

app_name = "products"

urlpatterns = [
    path("", ProductCollectionView.as_view(), name="product-collection"),
    path("categories/", ProductCategoriesView.as_view(), name="product-categories"),
    path("<uuid:product_id>/", ProductDetailView.as_view(), name="product-detail"),
]
