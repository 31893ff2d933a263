"""
Open Beauty Facts engine for cosmetics and personal care products.

Supports : EAN-8, EAN-13, UPC-A
Data : ingredients, allergens, labels, categories
"""

from typing import Any, Dict, List, Optional

from ..interfaces import CosmeticsData, ProductCategory, ProductInfo
from ..normalization import build_metadata, clean_text, flatten_names, secure_url
from .base import OpenFactsEngine, OpenFactsProduct


class BeautyProduct(OpenFactsProduct):
    allergens_tags: Optional[List[str]] = None
    labels_tags: Optional[List[str]] = None
    categories_tags: Optional[List[str]] = None
    periods_after_opening: Optional[str] = None


class OpenBeautyFactsEngine(OpenFactsEngine):
    """Cosmetics; tried after food and medicine sources."""

    NAME = "Open Beauty Facts"
    PRIORITY = 5
    CATEGORY = ProductCategory.COSMETICS

    BASE_URL = "https://world.openbeautyfacts.org"
    PRODUCT_MODEL = BeautyProduct

    def map_product(self, barcode: str, product: BeautyProduct, raw: Dict[str, Any]) -> Optional[ProductInfo]:
        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=clean_text(product.product_name),
            brand=clean_text(product.brands),
            description=None,
            image_url=secure_url(product.image_front_url or product.image_url),
            cosmetics=CosmeticsData(
                ingredients=clean_text(product.ingredients_text),
                allergens=flatten_names(product.allergens_tags),
                labels=flatten_names(product.labels_tags),
                categories=flatten_names(product.categories_tags),
            ),
            raw_metadata=build_metadata(
                quantity=product.quantity,
                periods_after_opening=product.periods_after_opening,
            ),
        )
