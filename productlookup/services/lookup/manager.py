"""
Factory for the lookup engines, registry and orchestrator.
Everything is built once at startup and handed to consumers by reference.

Architecture Pattern : Factory + explicit startup wiring
"""

from typing import Iterable, List, Optional, Type
import structlog

from productlookup.core.config import Settings, settings as default_settings
from .engines import DEFAULT_ENGINES, BaseLookupEngine
from .http_client import LookupHttpClient, RetryConfig
from .orchestrator import LookupOrchestrator
from .registry import EngineRegistry

logger = structlog.get_logger(__name__)


class LookupEngineFactory:
    """
    Builds the default lookup stack from settings.

    Usage :
        factory = LookupEngineFactory(settings)
        client = factory.create_http_client()
        orchestrator = factory.create_orchestrator(factory.create_registry(client))
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def create_http_client(self) -> LookupHttpClient:
        """Creates the HTTP client shared by every engine."""
        return LookupHttpClient(
            user_agent=self.config.lookup_user_agent,
            timeout=self.config.lookup_http_timeout,
            retry=RetryConfig(
                max_attempts=self.config.lookup_retry_attempts,
                initial_delay=self.config.lookup_retry_initial_delay,
                max_delay=self.config.lookup_retry_max_delay,
                backoff_multiplier=self.config.lookup_retry_backoff,
            ),
        )

    def create_engines(self,
                       http_client: LookupHttpClient,
                       engine_classes: Iterable[Type[BaseLookupEngine]] = DEFAULT_ENGINES) -> List[BaseLookupEngine]:
        """
        Instantiates the engines, skipping disabled ones.

        Args:
            http_client: Shared HTTP client
            engine_classes: Engine types in registration order

        Returns:
            Engine instances in registration order
        """
        disabled = {name.lower() for name in self.config.lookup_disabled_engines}
        engines = []

        for engine_class in engine_classes:
            if engine_class.NAME.lower() in disabled:
                logger.info("Engine disabled by configuration", engine=engine_class.NAME)
                continue
            engines.append(engine_class(http_client))

        return engines

    def create_registry(self, http_client: LookupHttpClient) -> EngineRegistry:
        return EngineRegistry(self.create_engines(http_client))

    def create_orchestrator(self, registry: EngineRegistry) -> LookupOrchestrator:
        return LookupOrchestrator(registry, engine_timeout=self.config.lookup_engine_timeout)
