# =============================================================================
# L4 Planning - Strategy Registry
# =============================================================================
# Explicit name -> factory lookup. Created once by the coordinator and passed
# to whatever needs to resolve a strategy name.
# =============================================================================

from typing import Callable, Dict, List

from loguru import logger

from .base import SearchStrategy
from .algorithms import (
    AStar,
    AStarCS,
    AStarRR,
    AStarRRSW,
    AStarT,
    DStarLite,
    RapidExploringRandomTree,
    VectorField,
    VectorFieldSS,
    VectorFieldSSW
)

StrategyFactory = Callable[[], SearchStrategy]


class StrategyRegistry:
    """
    Registry of available planning strategies.

    Names keep their registration order; the first one is the default.
    Factories are called on every create(), so stateful planners such as
    DStarLite are never shared between simulations.
    """

    def __init__(self):
        self._factories: Dict[str, StrategyFactory] = {}

    def register(self, name: str, factory: StrategyFactory, replace: bool = False):
        """
        Add a strategy.

        Args:
            name: Identifier used by vehicle descriptions
            factory: Zero-argument callable returning a new strategy
            replace: Allow overriding an existing name
        """
        if not name:
            raise ValueError("Strategy name must not be empty")
        if not callable(factory):
            raise ValueError(f"Factory for {name} is not callable")
        if name in self._factories and not replace:
            raise ValueError(f"Strategy already registered: {name}")
        self._factories[name] = factory
        logger.debug(f"Registered strategy {name}")

    def create(self, name: str) -> SearchStrategy:
        """Build a new instance of the named strategy."""
        if name not in self._factories:
            raise ValueError(f"Unknown strategy: {name}")
        return self._factories[name]()

    def names(self) -> List[str]:
        return list(self._factories)

    def default_name(self) -> str:
        if not self._factories:
            raise ValueError("No strategies registered")
        return next(iter(self._factories))

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def default_registry() -> StrategyRegistry:
    """Registry holding every built-in strategy."""
    registry = StrategyRegistry()
    for cls in (AStar, AStarCS, AStarRR, AStarRRSW, AStarT, DStarLite,
                RapidExploringRandomTree, VectorField, VectorFieldSS, VectorFieldSSW):
        registry.register(cls.name, cls)
    return registry
