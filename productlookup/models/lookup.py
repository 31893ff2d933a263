"""
Response schemas for the lookup API.
Converts orchestration outcomes into JSON-friendly pydantic models.
"""

from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from productlookup.services.lookup import (
    Error,
    Exhausted,
    Found,
    ILookupEngine,
    NoCandidates,
    NotFound,
    OrchestrationOutcome,
    ProductCategory,
    ProductInfo,
    Resolved,
)


class OutcomeStatus(str, Enum):
    """Top-level lookup status."""
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    NO_CANDIDATES = "no_candidates"


class AttemptStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ProductSchema(BaseModel):
    """Canonical product record."""

    barcode: str
    source: str
    category: ProductCategory
    name: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    food: Optional[Dict[str, Any]] = None
    book: Optional[Dict[str, Any]] = None
    medicine: Optional[Dict[str, Any]] = None
    cosmetics: Optional[Dict[str, Any]] = None
    raw_metadata: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_product(cls, product: ProductInfo) -> "ProductSchema":
        return cls(
            barcode=product.barcode,
            source=product.source,
            category=product.category,
            name=product.name,
            brand=product.brand,
            description=product.description,
            image_url=product.image_url,
            food=asdict(product.food) if product.food else None,
            book=asdict(product.book) if product.book else None,
            medicine=asdict(product.medicine) if product.medicine else None,
            cosmetics=asdict(product.cosmetics) if product.cosmetics else None,
            raw_metadata=dict(product.raw_metadata),
        )


class AttemptSchema(BaseModel):
    """One engine result in the attempt trail."""

    source: str
    status: AttemptStatus
    error: Optional[str] = None


class LookupResponse(BaseModel):
    """Result of resolving a barcode."""

    barcode: str
    status: OutcomeStatus
    product: Optional[ProductSchema] = None
    attempts: List[AttemptSchema] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, barcode: str, outcome: OrchestrationOutcome) -> "LookupResponse":
        if isinstance(outcome, Resolved):
            return cls(
                barcode=barcode,
                status=OutcomeStatus.RESOLVED,
                product=ProductSchema.from_product(outcome.product),
            )

        if isinstance(outcome, Exhausted):
            attempts = []
            for attempt in outcome.attempts:
                result = attempt.result
                if isinstance(result, Error):
                    attempts.append(AttemptSchema(source=attempt.source, status=AttemptStatus.ERROR, error=result.reason))
                elif isinstance(result, NotFound):
                    attempts.append(AttemptSchema(source=attempt.source, status=AttemptStatus.NOT_FOUND))
                elif isinstance(result, Found):
                    attempts.append(AttemptSchema(source=attempt.source, status=AttemptStatus.FOUND))
            return cls(barcode=barcode, status=OutcomeStatus.EXHAUSTED, attempts=attempts)

        if isinstance(outcome, NoCandidates):
            return cls(barcode=barcode, status=OutcomeStatus.NO_CANDIDATES)

        raise TypeError(f"Unknown orchestration outcome: {outcome!r}")


class FormatsResponse(BaseModel):
    """Classifier output for a barcode."""

    barcode: str
    formats: List[str]
    valid_check_digit: bool


class EngineSchema(BaseModel):
    name: str
    priority: int
    category: ProductCategory

    @classmethod
    def from_engine(cls, engine: ILookupEngine) -> "EngineSchema":
        return cls(name=engine.name, priority=engine.priority, category=engine.category)
