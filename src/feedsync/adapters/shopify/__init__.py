"""Shopify Admin GraphQL adapter package."""

from __future__ import annotations

from .client import ShopifyCatalog, raise_on_throttle
from .schema import GraphQLResponse, ProductNode
from .translator import translate_product

__all__ = [
    "GraphQLResponse",
    "ProductNode",
    "ShopifyCatalog",
    "raise_on_throttle",
    "translate_product",
]
