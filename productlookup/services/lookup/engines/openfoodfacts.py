"""
Open Food Facts engine.
Free, open database of food products.

API Documentation : https://openfoodfacts.github.io/openfoodfacts-server/api/
Supports : EAN-8, EAN-13, UPC-A
Data : Nutri-Score, NOVA group, ingredients, allergens, nutrition per 100g
"""

from typing import Any, Dict, List, Optional

from ..interfaces import FoodData, ProductCategory, ProductInfo
from ..normalization import (
    build_metadata,
    clean_text,
    flatten_names,
    format_grams,
    format_kcal,
    secure_url,
    to_int,
)
from .base import OpenFactsEngine, OpenFactsProduct


class FoodProduct(OpenFactsProduct):
    nutriscore_grade: Optional[str] = None
    nova_group: Optional[Any] = None
    allergens_tags: Optional[List[str]] = None
    serving_size: Optional[str] = None
    nutriments: Optional[Dict[str, Any]] = None


class OpenFoodFactsEngine(OpenFactsEngine):
    """Food products; highest priority engine for plain EAN/UPC codes."""

    NAME = "Open Food Facts"
    PRIORITY = 0
    CATEGORY = ProductCategory.FOOD

    BASE_URL = "https://world.openfoodfacts.org"
    API_PATH = "/api/v2/product/{barcode}.json"
    PRODUCT_MODEL = FoodProduct

    def map_product(self, barcode: str, product: FoodProduct, raw: Dict[str, Any]) -> Optional[ProductInfo]:
        name = clean_text(product.product_name)
        if name is None:
            # A record without a name is not useful to anyone
            return None

        nutriments = product.nutriments or {}
        nutri_score = clean_text(product.nutriscore_grade)

        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=name,
            brand=clean_text(product.brands),
            description=None,
            image_url=secure_url(product.image_front_url or product.image_url),
            food=FoodData(
                nutri_score=nutri_score.upper() if nutri_score else None,
                nova_group=to_int(product.nova_group),
                ingredients=clean_text(product.ingredients_text),
                allergens=flatten_names(product.allergens_tags),
                calories=format_kcal(nutriments.get("energy-kcal_100g")),
                fat=format_grams(nutriments.get("fat_100g")),
                carbs=format_grams(nutriments.get("carbohydrates_100g")),
                protein=format_grams(nutriments.get("proteins_100g")),
                salt=format_grams(nutriments.get("salt_100g"), decimals=2),
                sugar=format_grams(nutriments.get("sugars_100g")),
                fiber=format_grams(nutriments.get("fiber_100g")),
                serving_size=clean_text(product.serving_size),
            ),
            raw_metadata=build_metadata(
                categories=product.categories,
                quantity=product.quantity,
            ),
        )
