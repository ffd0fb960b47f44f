from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias

from graphwire._internal.descriptors import (
    ComponentDescriptor,
    ConstructorRecipe,
    DependencyRequirement,
    FactoryRecipe,
    Quantifier,
    ResolvedInstance,
    bind_arguments,
)
from graphwire._internal.keys import capability_key, is_open_generic, simple_name, template_key
from graphwire._internal.registry import ComponentRegistry
from graphwire.exceptions import (
    GraphWireConfigurationError,
    GraphWireCycleError,
    GraphWireNotFoundError,
)

logger = logging.getLogger(__name__)

SubstituteFactory: TypeAlias = Callable[[Any], Any | None]
"""Return a stand-in for a capability, or ``None`` to build it for real."""

ResolvedArgument: TypeAlias = tuple[DependencyRequirement, list[ResolvedInstance]]
"""A requirement paired with the instances injected for it."""


class ConstructionSink(Protocol):
    """Receive one record per real construction, in construction order."""

    def record(
        self,
        *,
        descriptor: ComponentDescriptor,
        symbol: str,
        arguments: Sequence[ResolvedArgument],
    ) -> None: ...


class SymbolNamer:
    """Assign transcript symbols from a per-context monotonically increasing counter."""

    def __init__(self) -> None:
        self._counter = itertools.count()

    def next_name(self, concrete_type: Any) -> str:
        return f"_{next(self._counter):03d}_{simple_name(concrete_type)}"


@dataclass(frozen=True, slots=True)
class Substitution:
    """Replace every non-root capability with a caller-supplied stand-in."""

    root_key: str
    factory: SubstituteFactory

    def value_for(self, descriptor: ComponentDescriptor) -> Any | None:
        if descriptor.capability_key == self.root_key:
            return None
        return self.factory(descriptor.capability)


class ResolutionEngine:
    """Materialize descriptors into a lazily built, memoized object graph.

    Traversal is depth-first in parameter order. Each descriptor is
    materialized at most once, and a concrete type implementing several
    capabilities is constructed once and shared by every capability view.
    The engine is not synchronized itself; the owning context serializes calls.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        namer: SymbolNamer | None = None,
        substitution: Substitution | None = None,
    ) -> None:
        self._registry = registry
        self._namer = namer or SymbolNamer()
        self._substitution = substitution
        self._materializing: list[ComponentDescriptor] = []

    @property
    def substitution(self) -> Substitution | None:
        return self._substitution

    def resolve_one(self, capability: Any, sink: ConstructionSink | None = None) -> ResolvedInstance:
        """Resolve the first descriptor registered for ``capability``.

        The exact key is tried first, then the arity-erased template key of a
        generic capability. Generic templates are specialized before they are
        materialized.

        Args:
            capability: Capability type to resolve.
            sink: Optional recorder of real constructions.

        Raises:
            GraphWireNotFoundError: If no key form yields an instance.

        """
        keys = self._registry.candidate_keys(capability)
        for key in keys:
            for descriptor in self._registry.lookup(key):
                bound = self._bind(descriptor, capability)
                if bound is None:
                    continue
                instances = self.materialize(bound, sink)
                if instances:
                    return instances[0]
                break

        raise GraphWireNotFoundError(capability, keys)

    def resolve_all(
        self,
        capability: Any,
        sink: ConstructionSink | None = None,
    ) -> list[ResolvedInstance]:
        """Resolve every descriptor registered for ``capability``, in order.

        A closed generic capability first specializes every matching template,
        so the result covers both closed registrations and template
        instantiations. Nothing registered resolves to an empty list.

        Args:
            capability: Capability type to resolve.
            sink: Optional recorder of real constructions.

        """
        erased = template_key(capability)
        if erased is not None and not is_open_generic(capability):
            for template in self._registry.lookup(erased):
                if template.is_generic_template:
                    self._registry.specialize(template, capability)

        resolved: list[ResolvedInstance] = []
        for descriptor in self._registry.lookup(capability_key(capability)):
            if descriptor.is_generic_template:
                continue
            resolved.extend(self.materialize(descriptor, sink))
        return resolved

    def materialize(
        self,
        descriptor: ComponentDescriptor,
        sink: ConstructionSink | None = None,
    ) -> list[ResolvedInstance]:
        """Build, adopt, or return the cached instances of ``descriptor``.

        Args:
            descriptor: Non-template descriptor to materialize.
            sink: Optional recorder of real constructions.

        Raises:
            GraphWireConfigurationError: If the descriptor has no recipe.
            GraphWireCycleError: If the descriptor is already being materialized.

        """
        if descriptor.is_generic_template:
            msg = f"Generic template {descriptor.name} must be specialized before materialization."
            raise GraphWireConfigurationError(msg)

        if descriptor.initialized:
            return descriptor.instances

        shared = self._shared_instances(descriptor)
        if shared:
            descriptor.instances = shared
            descriptor.initialized = True
            return descriptor.instances

        if descriptor in self._materializing:
            start = self._materializing.index(descriptor)
            chain = [item.capability_key for item in self._materializing[start:]]
            chain.append(descriptor.capability_key)
            raise GraphWireCycleError(chain)

        self._materializing.append(descriptor)
        try:
            descriptor.instances = self._build(descriptor, sink)
        finally:
            self._materializing.pop()
        descriptor.initialized = True
        return descriptor.instances

    def _build(
        self,
        descriptor: ComponentDescriptor,
        sink: ConstructionSink | None,
    ) -> list[ResolvedInstance]:
        if self._substitution is not None:
            stand_in = self._substitution.value_for(descriptor)
            if stand_in is not None:
                logger.debug("Substituted %s for %s", descriptor.name, descriptor.capability_key)
                return [
                    ResolvedInstance(
                        descriptor=descriptor,
                        value=stand_in,
                        symbolic_name=self._namer.next_name(descriptor.concrete_type),
                        concrete_key=descriptor.concrete_key,
                        substituted=True,
                    ),
                ]

        recipe = descriptor.recipe
        if recipe is None:
            msg = (
                f"Can't determine component dependencies of {descriptor.name}: "
                f"{descriptor.recipe_error}. Check that it has a constructor that takes only "
                "capabilities, collections of capabilities, or parameters with defaults."
            )
            raise GraphWireConfigurationError(msg)

        arguments = [self._resolve_requirement(requirement, sink) for requirement in recipe.requirements]
        args, kwargs = bind_arguments(
            recipe.requirements,
            [self._argument_value(argument) for argument in arguments],
        )

        if isinstance(recipe, ConstructorRecipe):
            value = recipe.constructor(*args, **kwargs)
            instance = ResolvedInstance(
                descriptor=descriptor,
                value=value,
                symbolic_name=self._namer.next_name(descriptor.concrete_type),
                concrete_key=descriptor.concrete_key,
            )
            if sink is not None:
                sink.record(descriptor=descriptor, symbol=instance.symbolic_name, arguments=arguments)
            logger.debug("Constructed %s as %s", descriptor.name, instance.symbolic_name)
            self._back_register(instance, descriptor.concrete_type)
            return [instance]

        return self._invoke_factory(descriptor, recipe, args, kwargs, arguments, sink)

    def _invoke_factory(  # noqa: PLR0913
        self,
        descriptor: ComponentDescriptor,
        recipe: FactoryRecipe,
        args: list[Any],
        kwargs: dict[str, Any],
        arguments: list[ResolvedArgument],
        sink: ConstructionSink | None,
    ) -> list[ResolvedInstance]:
        result = recipe.factory(*args, **kwargs)
        symbol = self._namer.next_name(recipe.owner)
        if sink is not None:
            sink.record(descriptor=descriptor, symbol=symbol, arguments=arguments)

        if recipe.output is Quantifier.SINGLE:
            logger.debug("Factory %s produced %s", descriptor.name, symbol)
            return [self._factory_output(descriptor, result, symbol)]

        if not isinstance(result, Sequence) or isinstance(result, str | bytes):
            msg = (
                f"Factory {descriptor.name} is declared to return a collection but returned "
                f"{type(result).__name__}; return a tuple or a list."
            )
            raise GraphWireConfigurationError(msg)
        logger.debug("Factory %s produced %d instances as %s", descriptor.name, len(result), symbol)
        return [
            self._factory_output(descriptor, value, f"{symbol}[{index}]")
            for index, value in enumerate(result)
        ]

    def _factory_output(self, descriptor: ComponentDescriptor, value: Any, symbol: str) -> ResolvedInstance:
        # factory outputs are identified by the type of the returned value
        instance = ResolvedInstance(
            descriptor=descriptor,
            value=value,
            symbolic_name=symbol,
            concrete_key=capability_key(type(value)),
        )
        self._back_register(instance, type(value))
        return instance

    def _resolve_requirement(
        self,
        requirement: DependencyRequirement,
        sink: ConstructionSink | None,
    ) -> ResolvedArgument:
        if requirement.quantifier is Quantifier.SINGLE:
            return requirement, [self.resolve_one(requirement.capability, sink)]
        return requirement, self.resolve_all(requirement.capability, sink)

    def _argument_value(self, argument: ResolvedArgument) -> Any:
        requirement, instances = argument
        if requirement.quantifier is Quantifier.SINGLE:
            return instances[0].value
        return requirement.container(instance.value for instance in instances)

    def _shared_instances(self, descriptor: ComponentDescriptor) -> list[ResolvedInstance]:
        shared: list[ResolvedInstance] = []
        seen: set[int] = set()
        for instance in self._registry.initialized_instances():
            if instance.substituted or instance.concrete_key != descriptor.concrete_key:
                continue
            if id(instance.value) in seen:
                continue
            seen.add(id(instance.value))
            shared.append(instance)
        return shared

    def _back_register(self, instance: ResolvedInstance, concrete_type: Any) -> None:
        extractor = self._registry.extractor
        for capability in extractor.implemented_capabilities(concrete_type):
            key = capability_key(capability)
            if key == instance.descriptor.capability_key or not self._registry.has_bucket(key):
                continue
            for sibling in self._registry.lookup(key):
                if sibling.initialized or sibling.concrete_key != instance.concrete_key:
                    continue
                sibling.instances.append(instance)
                sibling.initialized = True
                logger.debug("Attached %s to %s", instance.symbolic_name, key)

    def _bind(self, descriptor: ComponentDescriptor, capability: Any) -> ComponentDescriptor | None:
        if not descriptor.is_generic_template:
            return descriptor
        if is_open_generic(capability):
            msg = f"Cannot resolve open generic capability {capability_key(capability)}."
            raise GraphWireConfigurationError(msg)
        return self._registry.specialize(descriptor, capability)
