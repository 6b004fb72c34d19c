"""Registry of runtime resource collector backends."""
import logging
from typing import Dict, List, Type

logger = logging.getLogger(__name__)


class CollectorRegistry:
    """Registry for selecting a runtime collector backend by name."""

    _collectors: Dict[str, Type] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, name: str):
        """Decorator to register a runtime collector class.

        Args:
            name: Unique identifier for the backend (e.g., "disabled", "playwright")

        Example:
            @CollectorRegistry.register("playwright")
            class PlaywrightRuntimeCollector:
                async def collect(self, url: str, wait_until: str, timeout_ms: int) -> ResourceManifest:
                    ...
        """
        def decorator(collector_class: Type):
            if name in cls._collectors:
                logger.warning(f"Collector '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._collectors[name] = collector_class
            logger.debug(f"Registered runtime collector: {name} -> {collector_class.__name__}")
            return collector_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered backends in registration order."""
        return cls._order.copy()

    @classmethod
    def create(cls, name: str):
        """Instantiate the backend registered under name.

        Raises:
            ValueError: if no backend is registered under that name
        """
        collector_class = cls._collectors.get(name)
        if collector_class is None:
            raise ValueError(
                f"Unknown runtime collector '{name}', available: {', '.join(cls._order) or 'none'}"
            )
        logger.debug(f"Instantiated runtime collector: {name}")
        return collector_class()
