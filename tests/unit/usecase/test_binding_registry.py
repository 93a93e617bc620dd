"""Tests for BindingRegistry."""

from unittest.mock import MagicMock


def _binding(master_key):
    binding = MagicMock(name=master_key)
    binding.store_name = "Players"
    binding.master_key = master_key
    return binding


class TestBindingRegistry:
    def test_register_keeps_insertion_order(self, registry):
        a, b, c = _binding("a"), _binding("b"), _binding("c")
        for binding in (a, b, c):
            registry.register(binding)

        assert registry.snapshot() == [a, b, c]
        assert len(registry) == 3

    def test_register_twice_is_noop(self, registry):
        a = _binding("a")
        registry.register(a)
        registry.register(a)

        assert len(registry) == 1

    def test_membership_is_by_identity(self, registry):
        a = _binding("a")
        registry.register(a)

        assert a in registry
        assert _binding("a") not in registry

    def test_unregister(self, registry):
        a, b = _binding("a"), _binding("b")
        registry.register(a)
        registry.register(b)

        assert registry.unregister(a) is True
        assert registry.unregister(a) is False
        assert registry.snapshot() == [b]

    def test_for_each_tolerates_removal_during_iteration(self, registry):
        bindings = [_binding(str(i)) for i in range(4)]
        for binding in bindings:
            registry.register(binding)
        visited = []

        def visit(binding):
            visited.append(binding)
            registry.unregister(binding)

        registry.for_each(visit)

        assert visited == bindings
        assert len(registry) == 0

    def test_snapshot_is_a_copy(self, registry):
        a = _binding("a")
        registry.register(a)

        snapshot = registry.snapshot()
        snapshot.clear()

        assert len(registry) == 1

    def test_clear(self, registry):
        registry.register(_binding("a"))
        registry.clear()

        assert list(registry) == []
