# orders/urls.py

"""
ORDERS URLS

Mounted under /api/orders/
"""

from django.urls import path

from orders.views import OrderCollectionView

app_name = "orders"

urlpatterns = [
    path("", OrderCollectionView.as_view(), name="order-collection"),
]
