from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from inspect import Parameter
from typing import Any, TypeAlias


class Quantifier(Enum):
    """Describe how many instances a requirement or a factory deals with."""

    SINGLE = auto()
    """Exactly one instance, resolved from the first registered descriptor."""

    COLLECTION = auto()
    """Every instance registered for the capability, in registration order."""


@dataclass(frozen=True, slots=True)
class DependencyRequirement:
    """Represent one constructor or factory parameter resolved from the graph."""

    quantifier: Quantifier
    capability: Any
    parameter: Parameter
    container: type[Any] = tuple
    """Runtime collection type used for ``COLLECTION`` requirements."""


@dataclass(frozen=True, slots=True)
class ConstructorRecipe:
    """Build an instance by calling the concrete type with resolved requirements."""

    constructor: Callable[..., Any]
    requirements: tuple[DependencyRequirement, ...]


@dataclass(frozen=True, slots=True)
class FactoryRecipe:
    """Build one instance or a sequence of instances with a static factory."""

    owner: type[Any]
    factory: Callable[..., Any]
    requirements: tuple[DependencyRequirement, ...]
    output: Quantifier


Recipe: TypeAlias = ConstructorRecipe | FactoryRecipe


def bind_arguments(
    requirements: Sequence[DependencyRequirement],
    values: Sequence[Any],
) -> tuple[list[Any], dict[str, Any]]:
    """Split resolved values into positional and keyword call arguments.

    Positional-only parameters are passed positionally, everything else by
    keyword, so parameters skipped for their defaults never shift positions.
    """
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for requirement, value in zip(requirements, values, strict=True):
        if requirement.parameter.kind is Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[requirement.parameter.name] = value
    return args, kwargs


@dataclass(kw_only=True, eq=False)
class ComponentDescriptor:
    """Describe one registered way to obtain instances of a capability.

    A concrete type implementing several capabilities has one descriptor per
    capability; the engine makes them share the same instances. ``instances``
    stays empty until ``initialized`` is set and is never mutated afterwards.
    """

    name: str
    """Stable identifier derived from the concrete type or factory owner."""
    concrete_type: Any
    """Implementation class, or a parameterized alias for specialized generics."""
    concrete_key: str
    """Identity used by the one-instance-per-concrete-type rule."""
    capability: Any
    """Capability type this descriptor is registered under."""
    capability_key: str
    """Canonical key of ``capability``."""
    recipe: Recipe | None
    """How to build instances; ``None`` when no qualifying constructor exists."""
    recipe_error: str | None = None
    """Why ``recipe`` is missing."""
    is_generic_template: bool = False
    """True for unbound generic shapes that are only ever specialized."""
    template: ComponentDescriptor | None = None
    """Template this descriptor was specialized from, if any."""

    instances: list[ResolvedInstance] = field(default_factory=list)
    initialized: bool = False

    def __repr__(self) -> str:
        return f"ComponentDescriptor(name={self.name!r}, capability={self.capability_key!r})"


@dataclass(frozen=True, slots=True, eq=False)
class ResolvedInstance:
    """Bind a materialized value to its producing descriptor and transcript symbol."""

    descriptor: ComponentDescriptor
    value: Any
    symbolic_name: str
    concrete_key: str
    """Key of the concrete type that was built, shared by every capability view of it."""
    substituted: bool = False
    """True for stand-ins returned by a substitution factory."""
