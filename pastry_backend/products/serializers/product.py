# products/serializers/product.py

"""
PRODUCT SERIALIZERS

- ProductSerializer: read shape used by the public catalog and admin lists.
- ProductWriteSerializer: admin create/update. Accepts tags as either a list
  or a comma-separated string; `price: null` clears the price.
"""

from rest_framework import serializers

from products.models import Product
from products.services.catalog import parse_tags


class ProductSerializer(serializers.ModelSerializer):
    category_label = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "category_label",
            "tags",
            "ingredients",
            "image_url",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TagsField(serializers.Field):
    def to_internal_value(self, data):
        try:
            return parse_tags(data)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc

    def to_representation(self, value):
        return list(value or [])


class ProductWriteSerializer(serializers.ModelSerializer):
    tags = TagsField(required=False)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )

    class Meta:
        model = Product
        fields = [
            "name",
            "description",
            "price",
            "category",
            "tags",
            "ingredients",
            "image_url",
            "is_active",
        ]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "category": {"required": False, "allow_blank": True},
            "ingredients": {"required": False, "allow_blank": True},
            "image_url": {"required": False, "allow_blank": True},
        }

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price must be a number greater than or equal to 0")
        return value

    def validate_category(self, value):
        return (value or "").strip()
