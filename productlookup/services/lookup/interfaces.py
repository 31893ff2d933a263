"""
Interfaces for the product lookup engines.
Defines the canonical product record, the per-engine result union and
the contract every catalog engine implements.

Architecture Pattern : Interface Segregation Principle (ISP)
Inspiration : Strategy Pattern, Tagged Union results
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union
import structlog

logger = structlog.get_logger(__name__)


class ProductCategory(str, Enum):
    """Product categories used for engine routing and sub-record selection."""
    FOOD = "food"
    BOOK = "book"
    MEDICINE = "medicine"
    COSMETICS = "cosmetics"
    PET_FOOD = "pet_food"
    GENERIC = "generic"


@dataclass(frozen=True)
class FoodData:
    """Food data (Open Food Facts and Open Pet Food Facts)."""
    nutri_score: Optional[str] = None
    nova_group: Optional[int] = None
    ingredients: Optional[str] = None
    allergens: Optional[List[str]] = None
    calories: Optional[str] = None
    fat: Optional[str] = None
    carbs: Optional[str] = None
    protein: Optional[str] = None
    salt: Optional[str] = None
    sugar: Optional[str] = None
    fiber: Optional[str] = None
    serving_size: Optional[str] = None


@dataclass(frozen=True)
class BookData:
    """Book data (Google Books, Open Library)."""
    title: Optional[str] = None
    authors: Optional[List[str]] = None
    publisher: Optional[str] = None
    published_date: Optional[str] = None
    page_count: Optional[int] = None
    categories: Optional[List[str]] = None
    isbn10: Optional[str] = None
    isbn13: Optional[str] = None
    preview_link: Optional[str] = None
    info_link: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class MedicineData:
    """Drug label data (OpenFDA)."""
    generic_name: Optional[str] = None
    active_ingredients: Optional[List[str]] = None
    dosage_form: Optional[str] = None
    route: Optional[str] = None
    manufacturer: Optional[str] = None
    warnings: Optional[List[str]] = None
    contraindications: Optional[List[str]] = None
    indications: Optional[str] = None
    fda_approval_date: Optional[str] = None
    is_recalled: bool = False


@dataclass(frozen=True)
class CosmeticsData:
    """Cosmetics data (Open Beauty Facts)."""
    ingredients: Optional[str] = None
    allergens: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    categories: Optional[List[str]] = None


# Sub-record attribute -> categories it may accompany
SUB_RECORD_CATEGORIES = {
    "food": (ProductCategory.FOOD, ProductCategory.PET_FOOD),
    "book": (ProductCategory.BOOK,),
    "medicine": (ProductCategory.MEDICINE,),
    "cosmetics": (ProductCategory.COSMETICS,),
}


@dataclass(frozen=True)
class ProductInfo:
    """
    Canonical product record produced by every engine.

    Universal fields are nullable: None means the source did not provide
    the value. Exactly one category-specific sub-record is populated for
    categories that have one; GENERIC products carry none.
    """
    barcode: str
    source: str
    category: ProductCategory

    name: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    food: Optional[FoodData] = None
    book: Optional[BookData] = None
    medicine: Optional[MedicineData] = None
    cosmetics: Optional[CosmeticsData] = None

    raw_metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validates the category / sub-record invariant."""
        populated = [
            attr for attr in SUB_RECORD_CATEGORIES
            if getattr(self, attr) is not None
        ]
        if len(populated) > 1:
            raise ProductInvariantError(
                f"Only one sub-record may be populated, got {populated}",
                barcode=self.barcode,
                engine=self.source,
            )

        expected = [
            attr for attr, categories in SUB_RECORD_CATEGORIES.items()
            if self.category in categories
        ]
        if populated != expected:
            raise ProductInvariantError(
                f"Category {self.category.value} requires sub-record {expected}, got {populated}",
                barcode=self.barcode,
                engine=self.source,
            )

    @property
    def details(self) -> Optional[Union[FoodData, BookData, MedicineData, CosmeticsData]]:
        """The populated category-specific sub-record, if any."""
        return self.food or self.book or self.medicine or self.cosmetics


# --- Per-engine lookup results ---

@dataclass(frozen=True)
class Found:
    """The engine returned a product."""
    product: ProductInfo
    source: str


@dataclass(frozen=True)
class NotFound:
    """The source was reachable and confirmed it has no such product."""
    source: str


@dataclass(frozen=True)
class Error:
    """
    The lookup failed (network, timeout, malformed payload).

    The original cause is kept for diagnostics. Equality uses the rendered
    cause so repeated deterministic failures compare equal.
    """
    source: str
    cause: BaseException = field(compare=False)
    reason: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "reason", describe_exception(self.cause))


LookupResult = Union[Found, NotFound, Error]


def describe_exception(exc: BaseException) -> str:
    """Renders an exception as ``Type: message`` for attempt trails."""
    message = str(exc)
    if message:
        return f"{type(exc).__name__}: {message}"
    return type(exc).__name__


class ILookupEngine(ABC):
    """
    Contract for a catalog lookup engine.

    Responsibilities :
    - Declare its name, priority tier and product category
    - Decide locally (no I/O) whether a barcode is worth querying
    - Query exactly one remote service and map its payload to ProductInfo

    Engines are stateless apart from the shared HTTP client, so one instance
    can serve concurrent lookups.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique human-readable name, also used as ProductInfo.source."""
        pass

    @property
    @abstractmethod
    def priority(self) -> int:
        """Tier priority. Lower values are tried first."""
        pass

    @property
    @abstractmethod
    def category(self) -> ProductCategory:
        """The single category this engine produces."""
        pass

    @abstractmethod
    def supports(self, barcode: str) -> bool:
        """
        Checks whether this engine should be queried for a barcode.

        Args:
            barcode: Raw barcode as scanned

        Returns:
            True if the barcode format is plausible for this source
        """
        pass

    @abstractmethod
    async def lookup(self, barcode: str) -> LookupResult:
        """
        Looks the barcode up against the remote service.

        Args:
            barcode: Raw barcode as scanned

        Returns:
            Found, NotFound or Error. Never raises.
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"


# --- Exceptions ---

class LookupServiceError(Exception):
    """Base exception for lookup engine failures."""

    def __init__(self, message: str, engine: str = "", barcode: str = "", original_error: Exception = None):
        super().__init__(message)
        self.engine = engine
        self.barcode = barcode
        self.original_error = original_error


class LookupHttpError(LookupServiceError):
    """The remote service answered with an unexpected HTTP status."""

    def __init__(self, message: str, status: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status


class LookupRateLimitError(LookupHttpError):
    """The remote service rejected the call with HTTP 429."""
    pass


class LookupPayloadError(LookupServiceError):
    """The response body could not be decoded or validated."""
    pass


class ProductInvariantError(LookupServiceError, ValueError):
    """A ProductInfo was built with a sub-record that does not match its category."""
    pass


class DuplicateEngineError(LookupServiceError, ValueError):
    """Two engines were registered under the same name."""
    pass
