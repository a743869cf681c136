# products/views/product.py

"""
PRODUCTS API

GET    /api/products/               public catalog (active only unless admin)
                                    ?category=<name>  ?q=<search>
POST   /api/products/               admin: create
PUT    /api/products/?id=<uuid>     admin: partial update (tags, price, ...)
DELETE /api/products/?id=<uuid>     admin: delete
GET    /api/products/<uuid>/        public: single product

Response envelope matches the storefront client:
    {"success": true, "products": [...], "count": n}
    {"success": false, "error": "...", "message": "..."}
"""

from __future__ import annotations

import logging
import uuid

from django.db import DatabaseError
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api import PublicCatalogThrottle, fail, first_error
from products.models import Product
from products.serializers import ProductSerializer, ProductWriteSerializer
from products.services.catalog import filter_by_category, search_products, visible_products
from users.permissions import IsShopAdmin, is_shop_admin

logger = logging.getLogger(__name__)


def _product_id_param(request):
    raw = (request.query_params.get("id") or "").strip()
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


class ProductCollectionView(APIView):
    parser_classes = [JSONParser]
    throttle_classes = [PublicCatalogThrottle]

    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsShopAdmin()]

    @extend_schema(
        tags=["Catalog"],
        parameters=[
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="q", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: ProductSerializer(many=True)},
        description="Storefront catalog. Admins also see inactive products.",
    )
    def get(self, request, *args, **kwargs):
        try:
            qs = visible_products(include_inactive=is_shop_admin(request.user))
            qs = filter_by_category(qs, request.query_params.get("category"))
            qs = search_products(qs, request.query_params.get("q"))
            products = ProductSerializer(qs, many=True).data
        except DatabaseError as exc:
            logger.exception("Error fetching products")
            return fail(
                "Failed to fetch products",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=str(exc),
            )

        return Response(
            {"success": True, "products": products, "count": len(products)},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Admin"],
        request=ProductWriteSerializer,
        responses={
            201: ProductSerializer,
            400: OpenApiResponse(description="Validation error"),
        },
    )
    def post(self, request, *args, **kwargs):
        s = ProductWriteSerializer(data=request.data)
        if not s.is_valid():
            return fail(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)

        product = s.save()
        logger.info("Product created", extra={"product_id": str(product.id)})

        return Response(
            {"success": True, "product": ProductSerializer(product).data},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter(name="id", type=str, location=OpenApiParameter.QUERY, required=True),
        ],
        request=ProductWriteSerializer,
        responses={
            200: ProductSerializer,
            400: OpenApiResponse(description="Validation error"),
            404: OpenApiResponse(description="Product not found"),
        },
    )
    def put(self, request, *args, **kwargs):
        product_id = _product_id_param(request)
        if not product_id:
            return fail("Product ID is required", status.HTTP_400_BAD_REQUEST)

        product = Product.objects.filter(id=product_id).first()
        if not product:
            return fail("Product not found", status.HTTP_404_NOT_FOUND)

        s = ProductWriteSerializer(product, data=request.data, partial=True)
        if not s.is_valid():
            return fail(first_error(s.errors), status.HTTP_400_BAD_REQUEST, errors=s.errors)

        if not s.validated_data:
            return fail("No valid fields to update", status.HTTP_400_BAD_REQUEST)

        product = s.save()
        logger.info(
            "Product updated",
            extra={"product_id": str(product.id), "fields": sorted(s.validated_data)},
        )

        return Response(
            {"success": True, "product": ProductSerializer(product).data},
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter(name="id", type=str, location=OpenApiParameter.QUERY, required=True),
        ],
        responses={200: dict, 404: OpenApiResponse(description="Product not found")},
    )
    def delete(self, request, *args, **kwargs):
        product_id = _product_id_param(request)
        if not product_id:
            return fail("Product ID is required", status.HTTP_400_BAD_REQUEST)

        product = Product.objects.filter(id=product_id).first()
        if not product:
            return fail("Product not found", status.HTTP_404_NOT_FOUND)

        name = product.name
        product.delete()
        logger.info("Product deleted", extra={"product_id": str(product_id)})

        return Response(
            {"success": True, "message": f'Product "{name}" deleted'},
            status=status.HTTP_200_OK,
        )


class ProductDetailView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Catalog"], responses={200: ProductSerializer})
    def get(self, request, product_id, *args, **kwargs):
        qs = visible_products(include_inactive=is_shop_admin(request.user))
        product = qs.filter(id=product_id).first()
        if not product:
            return fail("Product not found", status.HTTP_404_NOT_FOUND)

        return Response(
            {"success": True, "product": ProductSerializer(product).data},
            status=status.HTTP_200_OK,
        )
