from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar, get_args, get_origin


def capability_key(capability: Any) -> str:
    """Return the canonical key of a capability type.

    Classes are keyed by ``module.QualName``. Parameterized generics append
    their canonicalized arguments in angle brackets, and an unbound ``TypeVar``
    contributes an empty slot, so ``Map[K, V]`` and ``Map`` both key as
    ``mod.Map<,>`` while ``Map[int, str]`` keys as
    ``mod.Map<builtins.int,builtins.str>``.

    Args:
        capability: Class, generic alias, or ``TypeVar`` to canonicalize.

    """
    if isinstance(capability, TypeVar):
        return ""
    if capability is Ellipsis:
        return "..."

    origin = get_origin(capability)
    if origin is not None:
        arguments = get_args(capability)
        return f"{type_name(origin)}<{','.join(capability_key(argument) for argument in arguments)}>"

    parameters = _typevar_parameters(capability)
    if parameters:
        return f"{type_name(capability)}<{','.join('' for _ in parameters)}>"
    return type_name(capability)


def template_key(capability: Any) -> str | None:
    """Return the arity-erased template key of a generic capability.

    ``Map[int, str]`` becomes ``mod.Map<,>``. Non-generic capabilities have no
    template key and return ``None``.

    Args:
        capability: Capability type to erase.

    """
    origin = get_origin(capability)
    if origin is not None:
        arguments = get_args(capability)
        if not arguments:
            return None
        return f"{type_name(origin)}<{','.join('' for _ in arguments)}>"

    parameters = _typevar_parameters(capability)
    if not parameters:
        return None
    return f"{type_name(capability)}<{','.join('' for _ in parameters)}>"


def type_name(value: Any) -> str:
    """Return ``module.QualName`` for a class, or ``repr`` for anything else."""
    module = getattr(value, "__module__", None)
    qualname = getattr(value, "__qualname__", None)
    if module is None or qualname is None:
        return repr(value)
    return f"{module}.{qualname}"


def simple_name(value: Any) -> str:
    """Return the lowercase unqualified name used for transcript symbols."""
    target = get_origin(value) or value
    return getattr(target, "__name__", type(target).__name__).lower()


def origin_or_self(value: Any) -> Any:
    return get_origin(value) or value


def is_open_generic(value: Any) -> bool:
    """Return whether a type expression still has unbound type parameters.

    A bare generic class such as ``Box`` counts as open, as does ``Box[T]``.
    """
    if isinstance(value, TypeVar):
        return True

    origin = get_origin(value)
    if origin is not None:
        return any(is_open_generic(argument) for argument in get_args(value))

    return bool(_typevar_parameters(value))


def collect_typevars(value: Any) -> tuple[TypeVar, ...]:
    """Return the distinct ``TypeVar`` nodes of a type expression in order."""
    found: list[TypeVar] = []
    _collect_typevars_into(value=value, found=found)
    return tuple(dict.fromkeys(found))


def _collect_typevars_into(*, value: Any, found: list[TypeVar]) -> None:
    if isinstance(value, TypeVar):
        found.append(value)
        return

    origin = get_origin(value)
    if origin is not None:
        for argument in get_args(value):
            _collect_typevars_into(value=argument, found=found)
        return

    found.extend(_typevar_parameters(value))


def substitute_typevars(value: Any, *, mapping: Mapping[TypeVar, Any]) -> Any:
    """Substitute TypeVars in a type expression using a resolved mapping.

    Args:
        value: Type expression template that may contain TypeVars.
        mapping: Mapping from template TypeVars to concrete type arguments.

    """
    if isinstance(value, TypeVar):
        return mapping.get(value, value)

    origin = get_origin(value)
    if origin is None:
        parameters = _typevar_parameters(value)
        if parameters and all(parameter in mapping for parameter in parameters):
            return rebuild_alias(
                origin=value,
                args=tuple(mapping[parameter] for parameter in parameters),
                fallback=value,
            )
        return value

    arguments = get_args(value)
    if not arguments:
        return value

    substituted_arguments = tuple(
        substitute_typevars(argument, mapping=mapping) for argument in arguments
    )
    return rebuild_alias(origin=origin, args=substituted_arguments, fallback=value)


def match_typevars(*, template: Any, concrete: Any) -> dict[TypeVar, Any] | None:
    """Bind the TypeVars of ``template`` so that it equals ``concrete``.

    Returns ``None`` when the two expressions have different shapes or when a
    TypeVar would need two different bindings.
    """
    mapping: dict[TypeVar, Any] = {}
    if _match_node(template=template, concrete=concrete, mapping=mapping):
        return mapping
    return None


def _match_node(
    *,
    template: Any,
    concrete: Any,
    mapping: dict[TypeVar, Any],
) -> bool:
    if isinstance(template, TypeVar):
        known = mapping.get(template)
        if known is None:
            mapping[template] = concrete
            return True
        return known == concrete

    template_origin = get_origin(template)
    if template_origin is None:
        parameters = _typevar_parameters(template)
        if parameters:
            opened = rebuild_alias(origin=template, args=parameters, fallback=template)
            if opened is not template:
                return _match_node(template=opened, concrete=concrete, mapping=mapping)
        return template == concrete

    if get_origin(concrete) != template_origin:
        return False

    template_arguments = get_args(template)
    concrete_arguments = get_args(concrete)
    if len(template_arguments) != len(concrete_arguments):
        return False

    return all(
        _match_node(template=template_argument, concrete=concrete_argument, mapping=mapping)
        for template_argument, concrete_argument in zip(
            template_arguments,
            concrete_arguments,
            strict=True,
        )
    )


def rebuild_alias(*, origin: Any, args: tuple[Any, ...], fallback: Any) -> Any:
    try:
        if len(args) == 1:
            return origin[args[0]]
        return origin[args]
    except TypeError:
        return fallback


def _typevar_parameters(value: Any) -> tuple[TypeVar, ...]:
    if not isinstance(value, type):
        return ()
    return tuple(
        parameter
        for parameter in getattr(value, "__parameters__", ())
        if isinstance(parameter, TypeVar)
    )
