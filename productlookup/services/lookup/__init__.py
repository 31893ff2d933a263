"""
Multi-source product lookup for scanned barcodes.
Routes a barcode to every catalog engine that can answer for it, tier by
tier, and returns one canonical ProductInfo or a full attempt trail.

Architecture : Strategy Pattern (engines) + Registry + Orchestrator
Usage : single entry point ``LookupOrchestrator.resolve``

Example:
    from productlookup.services.lookup import LookupEngineFactory, Resolved

    factory = LookupEngineFactory()
    client = factory.create_http_client()
    orchestrator = factory.create_orchestrator(factory.create_registry(client))

    outcome = await orchestrator.resolve("3017620422003")
    if isinstance(outcome, Resolved):
        print(outcome.product.name)
    await client.close()
"""

from .classifier import FormatTag, classify, has_valid_check_digit
from .interfaces import (
    ILookupEngine,
    ProductCategory,
    ProductInfo,
    FoodData,
    BookData,
    MedicineData,
    CosmeticsData,
    LookupResult,
    Found,
    NotFound,
    Error,
    LookupServiceError,
    LookupHttpError,
    LookupRateLimitError,
    LookupPayloadError,
    ProductInvariantError,
    DuplicateEngineError,
)
from .http_client import LookupHttpClient, RetryConfig, with_retry
from .registry import EngineRegistry
from .orchestrator import (
    LookupOrchestrator,
    OrchestrationOutcome,
    Resolved,
    Exhausted,
    NoCandidates,
    Attempt,
    EngineTimeoutError,
)
from .manager import LookupEngineFactory

__all__ = [
    # Classification
    "FormatTag",
    "classify",
    "has_valid_check_digit",

    # Model
    "ILookupEngine",
    "ProductCategory",
    "ProductInfo",
    "FoodData",
    "BookData",
    "MedicineData",
    "CosmeticsData",
    "LookupResult",
    "Found",
    "NotFound",
    "Error",

    # Exceptions
    "LookupServiceError",
    "LookupHttpError",
    "LookupRateLimitError",
    "LookupPayloadError",
    "ProductInvariantError",
    "DuplicateEngineError",
    "EngineTimeoutError",

    # Runtime
    "LookupHttpClient",
    "RetryConfig",
    "with_retry",
    "EngineRegistry",
    "LookupOrchestrator",
    "OrchestrationOutcome",
    "Resolved",
    "Exhausted",
    "NoCandidates",
    "Attempt",
    "LookupEngineFactory",
]
