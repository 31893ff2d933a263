"""
Engine registry.

Built once at startup and read-only afterwards, so concurrent resolves
need no locking.
"""

from itertools import groupby
from typing import Iterable, Iterator, List, Sequence, Tuple
import structlog

from .interfaces import DuplicateEngineError, ILookupEngine, ProductCategory

logger = structlog.get_logger(__name__)

Tier = Tuple[int, Tuple[ILookupEngine, ...]]


class EngineRegistry:
    """
    Immutable, priority-ordered set of lookup engines.

    Engines are kept sorted by ascending priority; engines sharing a
    priority keep their registration order.
    """

    def __init__(self, engines: Iterable[ILookupEngine]):
        engines = list(engines)

        seen = set()
        for engine in engines:
            if engine.name in seen:
                raise DuplicateEngineError(
                    f"Engine name registered twice: {engine.name!r}",
                    engine=engine.name,
                )
            seen.add(engine.name)

        # sorted() is stable: equal priorities keep registration order
        self._engines: Tuple[ILookupEngine, ...] = tuple(
            sorted(engines, key=lambda engine: engine.priority)
        )

        logger.info(
            "Engine registry built",
            engines=[engine.name for engine in self._engines],
        )

    def all(self) -> List[ILookupEngine]:
        return list(self._engines)

    def for_category(self, category: ProductCategory) -> List[ILookupEngine]:
        return [engine for engine in self._engines if engine.category == category]

    def names(self) -> List[str]:
        return [engine.name for engine in self._engines]

    def candidates(self, barcode: str) -> List[ILookupEngine]:
        """
        Engines whose ``supports`` accepts the barcode, in priority order.

        An engine whose predicate raises is treated as not supporting it.
        """
        selected = []
        for engine in self._engines:
            try:
                if engine.supports(barcode):
                    selected.append(engine)
            except Exception as e:
                logger.warning(
                    "Engine supports() check failed",
                    engine=engine.name,
                    barcode=barcode,
                    error=str(e),
                )
        return selected

    @staticmethod
    def tiers(engines: Sequence[ILookupEngine]) -> List[Tier]:
        """Groups a priority-ordered engine list into (priority, engines) tiers."""
        ordered = sorted(engines, key=lambda engine: engine.priority)
        return [
            (priority, tuple(members))
            for priority, members in groupby(ordered, key=lambda engine: engine.priority)
        ]

    def __iter__(self) -> Iterator[ILookupEngine]:
        return iter(self._engines)

    def __len__(self) -> int:
        return len(self._engines)
