from __future__ import annotations

from typing import Generic, TypeVar

from graphwire._internal.keys import (
    capability_key,
    collect_typevars,
    is_open_generic,
    match_typevars,
    simple_name,
    substitute_typevars,
    template_key,
    type_name,
)

K = TypeVar("K")
V = TypeVar("V")


class _Map(Generic[K, V]):
    pass


class _Plain:
    class Nested:
        pass


def test_capability_key_uses_module_and_qualified_name() -> None:
    assert capability_key(_Plain) == f"{__name__}._Plain"
    assert capability_key(_Plain.Nested) == f"{__name__}._Plain.Nested"
    assert capability_key(int) == "builtins.int"


def test_capability_key_canonicalizes_generic_arguments() -> None:
    assert capability_key(_Map[int, str]) == f"{__name__}._Map<builtins.int,builtins.str>"
    assert (
        capability_key(_Map[int, list[str]])
        == f"{__name__}._Map<builtins.int,builtins.list<builtins.str>>"
    )


def test_unbound_type_parameters_contribute_empty_slots() -> None:
    assert capability_key(_Map[K, V]) == f"{__name__}._Map<,>"
    assert capability_key(_Map) == f"{__name__}._Map<,>"
    assert capability_key(_Map[K, int]) == f"{__name__}._Map<,builtins.int>"


def test_template_key_erases_every_argument() -> None:
    assert template_key(_Map[int, str]) == f"{__name__}._Map<,>"
    assert template_key(_Map) == f"{__name__}._Map<,>"
    assert template_key(_Plain) is None


def test_equal_generic_capabilities_share_a_key() -> None:
    assert capability_key(_Map[int, str]) == capability_key(_Map[int, str])
    assert capability_key(_Map[int, str]) != capability_key(_Map[str, int])


def test_is_open_generic_detects_unbound_parameters() -> None:
    assert is_open_generic(_Map)
    assert is_open_generic(_Map[K, int])
    assert is_open_generic(K)
    assert not is_open_generic(_Map[int, str])
    assert not is_open_generic(_Plain)


def test_match_typevars_binds_template_parameters() -> None:
    assert match_typevars(template=_Map[K, int], concrete=_Map[str, int]) == {K: str}
    assert match_typevars(template=_Map, concrete=_Map[str, int]) == {K: str, V: int}


def test_match_typevars_rejects_shape_mismatches() -> None:
    assert match_typevars(template=_Map[K, int], concrete=_Map[str, str]) is None
    assert match_typevars(template=_Map[K, K], concrete=_Map[int, str]) is None
    assert match_typevars(template=_Map[K, K], concrete=_Map[int, int]) == {K: int}
    assert match_typevars(template=_Map[K, V], concrete=list[int]) is None


def test_substitute_typevars_rebuilds_nested_aliases() -> None:
    assert substitute_typevars(_Map[K, list[V]], mapping={K: int, V: str}) == _Map[int, list[str]]
    assert substitute_typevars(_Map, mapping={K: int, V: str}) == _Map[int, str]
    assert substitute_typevars(_Map, mapping={K: int}) is _Map
    assert substitute_typevars(_Plain, mapping={K: int}) is _Plain


def test_collect_typevars_returns_distinct_parameters_in_order() -> None:
    assert collect_typevars(_Map[K, list[V]]) == (K, V)
    assert collect_typevars(_Map[V, V]) == (V,)
    assert collect_typevars(_Plain) == ()


def test_names_used_for_descriptors_and_symbols() -> None:
    assert type_name(_Map) == f"{__name__}._Map"
    assert simple_name(_Map[int, str]) == "_map"
    assert simple_name(_Plain) == "_plain"
