"""
Lookup orchestrator: runs a barcode through every capable engine under a
tiered priority/fallback policy and folds the per-engine results into one
outcome.

Architecture Pattern : Chain of Responsibility over concurrent tiers
Strategy :
1. Select engines whose supports() accepts the barcode
2. Group them into tiers of equal priority, lowest priority first
3. Run each tier concurrently and wait for all of its members
4. First Found (registration order) wins; later tiers are never started
5. Otherwise return the full attempt trail
"""

import asyncio
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union
import structlog

from .interfaces import (
    Error,
    Found,
    ILookupEngine,
    LookupResult,
    NotFound,
    ProductInfo,
)
from .registry import EngineRegistry

logger = structlog.get_logger(__name__)

DEFAULT_ENGINE_TIMEOUT = 10.0


class EngineTimeoutError(asyncio.TimeoutError):
    """An engine did not answer within the orchestrator budget."""

    def __init__(self, engine: str, timeout: float):
        super().__init__(f"{engine} timed out after {timeout:g}s")
        self.engine = engine
        self.timeout = timeout


class EngineContractError(TypeError):
    """An engine returned something other than a LookupResult."""
    pass


@dataclass(frozen=True)
class Attempt:
    """One engine invocation in the attempt trail."""
    source: str
    result: LookupResult


@dataclass(frozen=True)
class Resolved:
    """At least one engine found the product."""
    product: ProductInfo

    @property
    def source(self) -> str:
        return self.product.source


@dataclass(frozen=True)
class Exhausted:
    """Every candidate engine answered NotFound or Error."""
    attempts: Tuple[Attempt, ...]

    @property
    def errors(self) -> List[Attempt]:
        return [attempt for attempt in self.attempts if isinstance(attempt.result, Error)]

    @property
    def all_failed(self) -> bool:
        """True when no engine could confirm absence (every attempt errored)."""
        return len(self.errors) == len(self.attempts)


@dataclass(frozen=True)
class NoCandidates:
    """No registered engine accepts this barcode format."""
    pass


OrchestrationOutcome = Union[Resolved, Exhausted, NoCandidates]


class LookupOrchestrator:
    """
    Coordinates product lookups across the registered engines.

    The orchestrator never raises: engine faults and timeouts are turned into
    Error results and recorded in the attempt trail.
    """

    def __init__(self, registry: EngineRegistry, engine_timeout: float = DEFAULT_ENGINE_TIMEOUT):
        """
        Args:
            registry: Read-only engine registry built at startup
            engine_timeout: Budget in seconds for a single engine lookup
        """
        self.registry = registry
        self.engine_timeout = engine_timeout

    async def resolve(self, barcode: str) -> OrchestrationOutcome:
        """
        Resolves a barcode tier by tier.

        Args:
            barcode: Raw barcode as scanned

        Returns:
            Resolved, Exhausted or NoCandidates
        """
        candidates = self.registry.candidates(barcode)
        if not candidates:
            logger.info("No engine supports barcode", barcode=barcode)
            return NoCandidates()

        logger.info(
            "Resolving barcode",
            barcode=barcode,
            engines=[engine.name for engine in candidates],
        )

        attempts: List[Attempt] = []
        started = time.monotonic()

        for priority, tier in self.registry.tiers(candidates):
            logger.debug(
                "Querying tier",
                barcode=barcode,
                tier=priority,
                engines=[engine.name for engine in tier],
            )
            results = await asyncio.gather(
                *(self._lookup_guarded(engine, barcode) for engine in tier)
            )

            winner = self._first_found(results)
            if winner is not None:
                logger.info(
                    "Barcode resolved",
                    barcode=barcode,
                    engine=winner.source,
                    tier=priority,
                    product_name=winner.product.name,
                    elapsed_ms=round((time.monotonic() - started) * 1000, 1),
                )
                return Resolved(product=winner.product)

            attempts.extend(
                Attempt(source=engine.name, result=result)
                for engine, result in zip(tier, results)
            )

        return self._exhausted(barcode, attempts, started)

    async def resolve_parallel(self, barcode: str) -> OrchestrationOutcome:
        """
        Queries every candidate at once, ignoring tier boundaries.

        Trades the extra calls to lower-priority sources for latency; the
        winner is still picked by priority then registration order.
        """
        candidates = self.registry.candidates(barcode)
        if not candidates:
            logger.info("No engine supports barcode", barcode=barcode)
            return NoCandidates()

        logger.info(
            "Resolving barcode in parallel",
            barcode=barcode,
            engines=[engine.name for engine in candidates],
        )

        started = time.monotonic()
        results = await asyncio.gather(
            *(self._lookup_guarded(engine, barcode) for engine in candidates)
        )

        winner = self._first_found(results)
        if winner is not None:
            logger.info("Barcode resolved", barcode=barcode, engine=winner.source)
            return Resolved(product=winner.product)

        attempts = [
            Attempt(source=engine.name, result=result)
            for engine, result in zip(candidates, results)
        ]
        return self._exhausted(barcode, attempts, started)

    async def _lookup_guarded(self, engine: ILookupEngine, barcode: str) -> LookupResult:
        """Runs one engine lookup under the timeout budget, converting faults to Error."""
        try:
            result = await asyncio.wait_for(engine.lookup(barcode), timeout=self.engine_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Engine timed out",
                engine=engine.name,
                barcode=barcode,
                timeout=self.engine_timeout,
            )
            return Error(source=engine.name, cause=EngineTimeoutError(engine.name, self.engine_timeout))
        except Exception as e:
            logger.error(
                "Engine raised past its boundary",
                engine=engine.name,
                barcode=barcode,
                error=str(e),
            )
            return Error(source=engine.name, cause=e)

        if not isinstance(result, (Found, NotFound, Error)):
            return Error(
                source=engine.name,
                cause=EngineContractError(f"Unexpected lookup result: {result!r}"),
            )

        if isinstance(result, Error):
            logger.warning(
                "Engine lookup failed",
                engine=engine.name,
                barcode=barcode,
                error=result.reason,
            )
        return result

    @staticmethod
    def _first_found(results: Sequence[LookupResult]) -> Optional[Found]:
        for result in results:
            if isinstance(result, Found):
                return result
        return None

    @staticmethod
    def _exhausted(barcode: str, attempts: List[Attempt], started: float) -> Exhausted:
        logger.info(
            "Barcode not found in any source",
            barcode=barcode,
            attempts=len(attempts),
            errors=sum(1 for attempt in attempts if isinstance(attempt.result, Error)),
            elapsed_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return Exhausted(attempts=tuple(attempts))
