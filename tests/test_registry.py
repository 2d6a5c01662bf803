"""Strategy name lookup."""

import numpy as np
import pytest

from L4_planning import (
    StrategyRegistry,
    default_registry,
    AStar,
    DStarLite,
    RapidExploringRandomTree
)


class TestDefaultRegistry:

    def test_names_in_registration_order(self):
        assert default_registry().names() == [
            'AStar', 'AStarCS', 'AStarRR', 'AStarRRSW', 'AStarT', 'DStarLite',
            'RapidExploringRandomTree', 'VectorField', 'VectorFieldSS', 'VectorFieldSSW']

    def test_default_is_first(self):
        assert default_registry().default_name() == 'AStar'

    def test_create_returns_named_strategy(self):
        registry = default_registry()
        for name in registry.names():
            strategy = registry.create(name)
            assert strategy.name == name
            assert callable(strategy.calculate_path)

    def test_fresh_instance_per_create(self):
        registry = default_registry()
        first = registry.create('DStarLite')
        second = registry.create('DStarLite')
        assert isinstance(first, DStarLite)
        assert first is not second

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown strategy: Dijkstra"):
            default_registry().create('Dijkstra')


class TestRegistration:

    def test_duplicate_rejected(self):
        registry = StrategyRegistry()
        registry.register('AStar', AStar)
        with pytest.raises(ValueError, match="already registered"):
            registry.register('AStar', AStar)

    def test_replace(self):
        registry = default_registry()
        registry.register('RapidExploringRandomTree',
                          lambda: RapidExploringRandomTree(rng=np.random.default_rng(3)),
                          replace=True)
        assert len(registry) == 10
        assert registry.names()[6] == 'RapidExploringRandomTree'
        assert isinstance(registry.create('RapidExploringRandomTree'), RapidExploringRandomTree)

    def test_late_registration(self):
        registry = default_registry()
        registry.register('Custom', AStar)
        assert 'Custom' in registry
        assert registry.names()[-1] == 'Custom'
        assert registry.default_name() == 'AStar'

    @pytest.mark.parametrize('name, factory', [('', AStar), ('Broken', None)])
    def test_invalid_registration(self, name, factory):
        with pytest.raises(ValueError):
            StrategyRegistry().register(name, factory)

    def test_empty_registry_has_no_default(self):
        with pytest.raises(ValueError):
            StrategyRegistry().default_name()
