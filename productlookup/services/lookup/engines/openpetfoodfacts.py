"""
Open Pet Food Facts engine. Lowest priority, pet food is a rare scan.
"""

from typing import Any, Dict, Optional

from ..interfaces import FoodData, ProductCategory, ProductInfo
from ..normalization import build_metadata, clean_text, format_grams, secure_url
from .base import OpenFactsEngine, OpenFactsProduct


class PetFoodProduct(OpenFactsProduct):
    nutriments: Optional[Dict[str, Any]] = None


class OpenPetFoodFactsEngine(OpenFactsEngine):

    NAME = "Open Pet Food Facts"
    PRIORITY = 6
    CATEGORY = ProductCategory.PET_FOOD

    BASE_URL = "https://world.openpetfoodfacts.org"
    PRODUCT_MODEL = PetFoodProduct

    def map_product(self, barcode: str, product: PetFoodProduct, raw: Dict[str, Any]) -> Optional[ProductInfo]:
        nutriments = product.nutriments or {}
        energy = nutriments.get("energy_100g")

        return ProductInfo(
            barcode=barcode,
            source=self.name,
            category=self.category,
            name=clean_text(product.product_name),
            brand=clean_text(product.brands),
            description=None,
            image_url=secure_url(product.image_front_url or product.image_url),
            food=FoodData(
                ingredients=clean_text(product.ingredients_text),
                # energy_100g is in kJ for pet food, passed through as-is
                calories=clean_text(energy),
                fat=format_grams(nutriments.get("fat_100g")),
                carbs=format_grams(nutriments.get("carbohydrates_100g")),
                protein=format_grams(nutriments.get("proteins_100g")),
                fiber=format_grams(nutriments.get("fiber_100g")),
            ),
            raw_metadata=build_metadata(
                categories=product.categories,
                quantity=product.quantity,
            ),
        )
