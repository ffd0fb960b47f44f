from __future__ import annotations

from typing import Any, Generic, TypeVar

import pytest

from graphwire._internal.keys import capability_key
from graphwire._internal.registry import ComponentRegistry
from graphwire.exceptions import GraphWireConfigurationError

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")
U = TypeVar("U")


class _IService:
    pass


class _Service(_IService):
    pass


class _OtherService(_IService):
    pass


class _IStore(Generic[T]):
    pass


class _MemoryStore(_IStore[T]):
    pass


class _IntStore(_IStore[int]):
    pass


class _IMap(Generic[K, V]):
    pass


class _IntValuedMap(_IMap[K, int]):
    pass


class _ExtraParameterStore(_IStore[T], Generic[T, U]):
    pass


class _IEvent:
    pass


class _Events:
    @staticmethod
    def wire() -> tuple[_IEvent, ...]:
        return ()


@pytest.fixture()
def registry() -> ComponentRegistry:
    return ComponentRegistry()


def _register(registry: ComponentRegistry, concrete_type: type[Any], capability: Any) -> Any:
    recipe, reason = registry.extractor.constructor_recipe(concrete_type)
    return registry.register(concrete_type, capability, recipe, recipe_error=reason)


def test_register_is_idempotent_per_concrete_type_and_capability(
    registry: ComponentRegistry,
) -> None:
    first = _register(registry, _Service, _IService)
    second = _register(registry, _Service, _IService)

    assert first is second
    assert len(registry) == 1
    assert first.name == f"{__name__}._Service"
    assert first.capability_key == f"{__name__}._IService"


def test_buckets_keep_registration_order(registry: ComponentRegistry) -> None:
    _register(registry, _Service, _IService)
    _register(registry, _OtherService, _IService)
    _register(registry, _Service, _Service)

    assert registry.registrations() == [
        (f"{__name__}._IService", [f"{__name__}._Service", f"{__name__}._OtherService"]),
        (f"{__name__}._Service", [f"{__name__}._Service"]),
    ]
    assert [descriptor.concrete_type for descriptor in registry.lookup(f"{__name__}._IService")] == [
        _Service,
        _OtherService,
    ]


def test_lookup_of_unknown_key_is_empty(registry: ComponentRegistry) -> None:
    assert registry.lookup("missing.Key") == []
    assert not registry.has_bucket("missing.Key")


def test_candidate_keys_try_exact_then_template_key(registry: ComponentRegistry) -> None:
    assert registry.candidate_keys(_IStore[int]) == [
        f"{__name__}._IStore<builtins.int>",
        f"{__name__}._IStore<>",
    ]
    assert registry.candidate_keys(_IService) == [f"{__name__}._IService"]


def test_open_generic_registrations_are_templates(registry: ComponentRegistry) -> None:
    template = _register(registry, _MemoryStore, _IStore[T])
    closed = _register(registry, _IntStore, _IStore[int])

    assert template.is_generic_template
    assert template.capability_key == f"{__name__}._IStore<>"
    assert not closed.is_generic_template


def test_specialize_binds_and_caches_per_type_arguments(registry: ComponentRegistry) -> None:
    template = _register(registry, _MemoryStore, _IStore[T])

    int_store = registry.specialize(template, _IStore[int])
    again = registry.specialize(template, _IStore[int])
    str_store = registry.specialize(template, _IStore[str])

    assert int_store is not None
    assert str_store is not None
    assert int_store is again
    assert int_store is not str_store
    assert int_store.concrete_type == _MemoryStore[int]
    assert int_store.capability_key == capability_key(_IStore[int])
    assert int_store.template is template
    assert not int_store.is_generic_template
    assert registry.lookup(capability_key(_IStore[int])) == [int_store]


def test_specialize_returns_none_for_shape_mismatch(registry: ComponentRegistry) -> None:
    template = _register(registry, _IntValuedMap, _IMap[K, int])

    assert registry.specialize(template, _IMap[str, str]) is None
    specialized = registry.specialize(template, _IMap[str, int])
    assert specialized is not None
    assert specialized.concrete_type == _IntValuedMap[str]


def test_specialize_rejects_unbound_concrete_parameters(registry: ComponentRegistry) -> None:
    template = _register(registry, _ExtraParameterStore, _IStore[T])

    with pytest.raises(GraphWireConfigurationError, match=r"type parameters \(U\)"):
        registry.specialize(template, _IStore[int])


def test_factory_descriptors_are_keyed_by_factory(registry: ComponentRegistry) -> None:
    capability, recipe = registry.extractor.factory_recipe(_Events)
    descriptor = registry.register(_Events, capability, recipe)

    assert descriptor.concrete_key == f"{__name__}._Events.wire->{__name__}._IEvent"
    assert descriptor.name == f"{__name__}._Events"
    assert registry.register(_Events, capability, recipe) is descriptor


def test_initialized_instances_skip_uninitialized_descriptors(registry: ComponentRegistry) -> None:
    _register(registry, _Service, _IService)

    assert list(registry.initialized_instances()) == []


def test_partially_bound_templates_are_stored_under_the_erased_key(
    registry: ComponentRegistry,
) -> None:
    template = _register(registry, _IntValuedMap, _IMap[K, int])

    assert template.is_generic_template
    assert template.capability_key == f"{__name__}._IMap<,>"
    assert registry.lookup(f"{__name__}._IMap<,>") == [template]
