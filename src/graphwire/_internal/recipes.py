from __future__ import annotations

import dataclasses
import datetime
import decimal
import inspect
import pathlib
import uuid
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, NamedTuple, TypeVar, get_args, get_origin, get_type_hints

from graphwire._internal.descriptors import (
    ConstructorRecipe,
    DependencyRequirement,
    FactoryRecipe,
    Quantifier,
    Recipe,
)
from graphwire._internal.keys import (
    capability_key,
    origin_or_self,
    substitute_typevars,
    type_name,
)
from graphwire.exceptions import GraphWireConfigurationError
from graphwire.markers import WIRER_FACTORY_NAME, is_all_annotation, strip_all_annotation

_MISSING_ANNOTATION: Any = object()
_IGNORED_CAPABILITY_MODULES = frozenset(
    {
        "abc",
        "builtins",
        "collections.abc",
        "_collections_abc",
        "enum",
        "typing",
        "typing_extensions",
    },
)
_SEQUENCE_ORIGINS: tuple[Any, ...] = (Sequence, Iterable, Collection)


class _Classified(NamedTuple):
    quantifier: Quantifier
    capability: Any
    container: type[Any]


@dataclass(frozen=True, slots=True)
class CapabilityPolicy:
    """Decide which annotations name capabilities the graph can resolve.

    Value-like standard library types are never capabilities, so constructor
    parameters annotated with them must carry defaults.
    """

    ignored_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
    )

    def is_capability(self, annotation: Any) -> bool:
        """Return true when ``annotation`` is a class or generic alias the graph can provide.

        Args:
            annotation: Resolved parameter or return annotation.

        """
        if isinstance(annotation, TypeVar):
            return False
        candidate = origin_or_self(annotation)
        if not isinstance(candidate, type):
            return False
        if candidate.__module__ in _IGNORED_CAPABILITY_MODULES:
            return False
        return not issubclass(candidate, self.ignored_base_types)


class RecipeExtractor:
    """Extract capabilities and construction recipes from discovered types.

    This is the only place that inspects signatures and annotations; the
    resolution engine works purely on the recipes produced here.
    """

    def __init__(self, policy: CapabilityPolicy | None = None) -> None:
        self._policy = policy or CapabilityPolicy()

    def implemented_capabilities(self, concrete_type: Any) -> tuple[Any, ...]:
        """Return every capability a concrete type implements, nearest first.

        Generic bases keep their parameterization, substituted with the
        arguments of ``concrete_type`` when it is a parameterized alias, so
        ``GetSet[int]`` implements ``IGet[int]`` and ``ISet[int]``. A class
        without any eligible base is its own capability.

        Args:
            concrete_type: Class or parameterized generic alias.

        """
        origin = origin_or_self(concrete_type)
        found: dict[str, Any] = {}
        self._walk_bases(
            cls=origin,
            mapping=self._typevar_mapping(concrete_type),
            found=found,
        )
        if not found:
            return (concrete_type,)
        return tuple(found.values())

    def constructor_recipe(self, concrete_type: type[Any]) -> tuple[Recipe | None, str | None]:
        """Build a constructor recipe, or explain why none qualifies.

        Every constructor parameter must be a capability, a collection of a
        capability, or have a default value.

        Args:
            concrete_type: Concrete class to inspect.

        Returns:
            ``(recipe, None)`` on success, ``(None, reason)`` otherwise.

        """
        try:
            parameters = tuple(inspect.signature(concrete_type).parameters.values())
        except (TypeError, ValueError) as error:
            return None, f"signature cannot be inspected ({error})"

        annotations, annotation_error = self._constructor_hints(concrete_type)
        requirements: list[DependencyRequirement] = []
        for parameter in parameters:
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            annotation = self._parameter_annotation(parameter, annotations)
            classified = (
                None if annotation is _MISSING_ANNOTATION else self._classify(annotation)
            )
            if classified is None:
                if parameter.default is not Parameter.empty:
                    continue
                reason = f"parameter '{parameter.name}' is not a capability"
                if annotation_error is not None:
                    reason = f"{reason} (annotation error: {annotation_error})"
                return None, reason
            requirements.append(
                DependencyRequirement(
                    quantifier=classified.quantifier,
                    capability=classified.capability,
                    parameter=parameter,
                    container=classified.container,
                ),
            )

        return ConstructorRecipe(constructor=concrete_type, requirements=tuple(requirements)), None

    def factory_recipe(self, owner: type[Any]) -> tuple[Any, FactoryRecipe]:
        """Build the recipe of a ``@wirer`` owner's static ``wire`` factory.

        Args:
            owner: Class carrying the ``@wirer`` tag.

        Returns:
            The capability the factory produces and its recipe.

        Raises:
            GraphWireConfigurationError: If ``wire`` is missing, not static, lacks a
                capability return annotation, or has an unresolvable parameter.

        """
        try:
            static_member = inspect.getattr_static(owner, WIRER_FACTORY_NAME)
        except AttributeError:
            static_member = None
        if not isinstance(static_member, staticmethod):
            msg = f"Type {type_name(owner)} does not have a static {WIRER_FACTORY_NAME} method."
            raise GraphWireConfigurationError(msg)

        factory = getattr(owner, WIRER_FACTORY_NAME)
        factory_name = f"{type_name(owner)}.{WIRER_FACTORY_NAME}"
        try:
            annotations = get_type_hints(factory, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            msg = f"Annotations of factory {factory_name} cannot be resolved: {error}"
            raise GraphWireConfigurationError(msg) from error

        return_annotation = annotations.get("return", _MISSING_ANNOTATION)
        output = (
            None if return_annotation is _MISSING_ANNOTATION else self._classify(return_annotation)
        )
        if output is None:
            msg = (
                f"Factory {factory_name} must be annotated to return a capability "
                "or a tuple/list of a capability."
            )
            raise GraphWireConfigurationError(msg)

        requirements: list[DependencyRequirement] = []
        for parameter in inspect.signature(factory).parameters.values():
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            annotation = self._parameter_annotation(parameter, annotations)
            classified = (
                None if annotation is _MISSING_ANNOTATION else self._classify(annotation)
            )
            if classified is None:
                if parameter.default is not Parameter.empty:
                    continue
                msg = f"Parameter '{parameter.name}' of factory {factory_name} is not a capability."
                raise GraphWireConfigurationError(msg)
            requirements.append(
                DependencyRequirement(
                    quantifier=classified.quantifier,
                    capability=classified.capability,
                    parameter=parameter,
                    container=classified.container,
                ),
            )

        recipe = FactoryRecipe(
            owner=owner,
            factory=factory,
            requirements=tuple(requirements),
            output=output.quantifier,
        )
        return output.capability, recipe

    def specialize_recipe(
        self,
        recipe: Recipe,
        *,
        concrete_type: Any,
        mapping: Mapping[TypeVar, Any],
    ) -> Recipe:
        """Return a copy of ``recipe`` with TypeVars in its requirements bound.

        Args:
            recipe: Template recipe.
            concrete_type: Specialized concrete type, used as the new constructor.
            mapping: TypeVar bindings taken from the requested capability.

        """
        requirements = tuple(
            dataclasses.replace(
                requirement,
                capability=substitute_typevars(requirement.capability, mapping=mapping),
            )
            for requirement in recipe.requirements
        )
        if isinstance(recipe, ConstructorRecipe):
            return ConstructorRecipe(constructor=concrete_type, requirements=requirements)
        return dataclasses.replace(recipe, requirements=requirements)

    def _classify(self, annotation: Any) -> _Classified | None:
        if is_all_annotation(annotation):
            capability = strip_all_annotation(annotation)
            if not self._policy.is_capability(capability):
                return None
            return _Classified(Quantifier.COLLECTION, capability, tuple)

        origin = get_origin(annotation)
        arguments = get_args(annotation)
        if origin is tuple and len(arguments) == 2 and arguments[1] is Ellipsis:  # noqa: PLR2004
            return self._collection_of(arguments[0], container=tuple)
        if origin is list and len(arguments) == 1:
            return self._collection_of(arguments[0], container=list)
        if origin in _SEQUENCE_ORIGINS and len(arguments) == 1:
            return self._collection_of(arguments[0], container=tuple)

        if self._policy.is_capability(annotation):
            return _Classified(Quantifier.SINGLE, annotation, tuple)
        return None

    def _collection_of(self, capability: Any, *, container: type[Any]) -> _Classified | None:
        if not self._policy.is_capability(capability):
            return None
        return _Classified(Quantifier.COLLECTION, capability, container)

    def _walk_bases(
        self,
        *,
        cls: type[Any],
        mapping: Mapping[TypeVar, Any],
        found: dict[str, Any],
    ) -> None:
        bases = cls.__dict__.get("__orig_bases__", cls.__bases__)
        for base in bases:
            base_origin = origin_or_self(base)
            if not isinstance(base_origin, type):
                continue
            if base_origin.__module__ in _IGNORED_CAPABILITY_MODULES:
                continue
            substituted = substitute_typevars(base, mapping=mapping)
            found.setdefault(capability_key(substituted), substituted)
            self._walk_bases(
                cls=base_origin,
                mapping=self._typevar_mapping(substituted),
                found=found,
            )

    def _typevar_mapping(self, value: Any) -> dict[TypeVar, Any]:
        origin = get_origin(value)
        if origin is None:
            return {}
        parameters = getattr(origin, "__parameters__", ())
        return dict(zip(parameters, get_args(value), strict=False))

    def _constructor_hints(
        self,
        concrete_type: type[Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(concrete_type.__init__, include_extras=True), None
        except (AttributeError, NameError, TypeError) as error:
            return {}, error

    def _parameter_annotation(self, parameter: Parameter, annotations: dict[str, Any]) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation
        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation
        return _MISSING_ANNOTATION
