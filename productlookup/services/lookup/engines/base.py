"""
Base classes shared by the concrete lookup engines.
"""

from abc import abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
import structlog

from ..classifier import is_all_digits, is_isbn13
from ..http_client import LookupHttpClient
from ..interfaces import (
    Error,
    Found,
    ILookupEngine,
    LookupPayloadError,
    LookupResult,
    NotFound,
    ProductCategory,
    ProductInfo,
)

logger = structlog.get_logger(__name__)

DTO = TypeVar("DTO", bound="Payload")


class Payload(BaseModel):
    """Base for upstream payload DTOs. Unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


def parse_payload(model: Type[DTO], data: Any, engine: str = "") -> DTO:
    """Validates a decoded JSON document against a DTO."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise LookupPayloadError(
            f"Unexpected payload shape: {e.error_count()} validation error(s)",
            engine=engine,
            original_error=e,
        )


class BaseLookupEngine(ILookupEngine):
    """
    Common engine plumbing.

    Subclasses declare ``NAME``, ``PRIORITY`` and ``CATEGORY`` and implement
    ``_lookup``; ``lookup`` turns every exception into an Error result.
    """

    NAME: str = ""
    PRIORITY: int = 100
    CATEGORY: ProductCategory = ProductCategory.GENERIC

    def __init__(self, http_client: LookupHttpClient):
        self.http = http_client

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def priority(self) -> int:
        return self.PRIORITY

    @property
    def category(self) -> ProductCategory:
        return self.CATEGORY

    async def lookup(self, barcode: str) -> LookupResult:
        logger.info("Looking up barcode", engine=self.name, barcode=barcode)
        try:
            result = await self._lookup(barcode)
        except Exception as e:
            logger.warning(
                "Lookup failed",
                engine=self.name,
                barcode=barcode,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Error(source=self.name, cause=e)

        if isinstance(result, Found):
            logger.info("Product found", engine=self.name, barcode=barcode, product_name=result.product.name)
        else:
            logger.info("Product not found", engine=self.name, barcode=barcode)
        return result

    @abstractmethod
    async def _lookup(self, barcode: str) -> LookupResult:
        """Performs the remote lookup. May raise; ``lookup`` converts failures."""
        pass

    def found(self, product: ProductInfo) -> Found:
        return Found(product=product, source=self.name)

    def not_found(self) -> NotFound:
        return NotFound(source=self.name)


class OpenFactsProduct(Payload):
    """Fields common to every Open*Facts product document."""
    product_name: Optional[str] = None
    brands: Optional[str] = None
    image_front_url: Optional[str] = None
    image_url: Optional[str] = None
    ingredients_text: Optional[str] = None
    quantity: Optional[str] = None
    categories: Optional[str] = None


class OpenFactsEngine(BaseLookupEngine):
    """
    Base for the Open*Facts family (food, beauty, pet food).

    All of them share the ``{status, product}`` envelope: status 1 with a
    product is a match, anything else (or HTTP 404) is a confirmed miss.
    """

    BASE_URL: str = ""
    API_PATH: str = "/api/v0/product/{barcode}.json"
    PRODUCT_MODEL: Type[OpenFactsProduct] = OpenFactsProduct

    def supports(self, barcode: str) -> bool:
        # Bookland EANs (978/979) are books, never Open*Facts products
        return is_all_digits(barcode) and 8 <= len(barcode) <= 13 and not is_isbn13(barcode)

    def product_url(self, barcode: str) -> str:
        return self.BASE_URL.rstrip("/") + self.API_PATH.format(barcode=barcode)

    async def _lookup(self, barcode: str) -> LookupResult:
        status, data = await self.http.get_json(self.product_url(barcode), engine=self.name)

        if status == 404 or data is None:
            return self.not_found()

        if not isinstance(data, dict):
            raise LookupPayloadError("Expected a JSON object", engine=self.name, barcode=barcode)

        if data.get("status") != 1 or not data.get("product"):
            return self.not_found()

        product = parse_payload(self.PRODUCT_MODEL, data["product"], engine=self.name)
        info = self.map_product(barcode, product, data["product"])
        if info is None:
            return self.not_found()
        return self.found(info)

    @abstractmethod
    def map_product(self, barcode: str, product: OpenFactsProduct, raw: Dict[str, Any]) -> Optional[ProductInfo]:
        """Maps the product document to ProductInfo; None means unusable (treated as NotFound)."""
        pass
