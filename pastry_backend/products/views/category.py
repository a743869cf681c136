# products/views/category.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from products.services.catalog import group_by_category, visible_products
from products.views.product import PublicCatalogThrottle


class ProductCategoriesView(APIView):
    """
    GET /api/products/categories/

    Categories derived from the active catalog, with product counts.
    Products without a category are grouped under "Uncategorized".
    """

    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Catalog"], responses={200: dict})
    def get(self, request, *args, **kwargs):
        categories = group_by_category(visible_products().only("category"))
        return Response(
            {"success": True, "categories": categories, "count": len(categories)},
            status=status.HTTP_200_OK,
        )
