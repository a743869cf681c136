# products/services/catalog.py

"""
CATALOG SERVICE

Small, query-level helpers behind the storefront catalog pages:
- tag parsing ("a, b, ,c" -> ["a", "b", "c"])
- category grouping with counts (missing category -> "Uncategorized")
- visible-product queryset with optional category + search filters
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from django.db.models import Q, QuerySet
from django.utils.text import slugify

from products.models import UNCATEGORIZED_LABEL, Product


def parse_tags(raw) -> list[str]:
    """
    Accepts either a comma-separated string or a list of strings.
    Returns trimmed, non-empty tags in their original order, without duplicates.
    """
    if raw is None:
        return []

    if isinstance(raw, str):
        parts = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        parts = [str(p) for p in raw if p is not None]
    else:
        raise ValueError("tags must be a string or a list of strings")

    tags: list[str] = []
    for part in parts:
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def group_by_category(products: Iterable[Product]) -> list[dict]:
    """
    [{"name": "Cakes", "slug": "cakes", "count": 3}, ...] sorted by name.
    """
    counts = Counter(p.category_label for p in products)
    return [
        {"name": name, "slug": slugify(name) or "uncategorized", "count": count}
        for name, count in sorted(counts.items(), key=lambda kv: kv[0].lower())
    ]


def filter_by_category(qs: QuerySet, category: str) -> QuerySet:
    category = (category or "").strip()
    if not category:
        return qs
    if category == UNCATEGORIZED_LABEL:
        return qs.filter(Q(category="") | Q(category__isnull=True))
    return qs.filter(category__iexact=category)


def search_products(qs: QuerySet, q: str) -> QuerySet:
    q = (q or "").strip()
    if not q:
        return qs

    # tags is a JSON list; a substring match on its text is portable across
    # SQLite and Postgres.
    return qs.filter(
        Q(name__icontains=q)
        | Q(description__icontains=q)
        | Q(ingredients__icontains=q)
        | Q(tags__icontains=q)
    )


def visible_products(*, include_inactive: bool = False) -> QuerySet:
    qs = Product.objects.all()
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")
