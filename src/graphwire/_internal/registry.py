from __future__ import annotations

from collections.abc import Iterator
from typing import Any, get_args

from graphwire._internal.descriptors import (
    ComponentDescriptor,
    FactoryRecipe,
    Recipe,
    ResolvedInstance,
)
from graphwire._internal.keys import (
    capability_key,
    collect_typevars,
    is_open_generic,
    match_typevars,
    origin_or_self,
    rebuild_alias,
    template_key,
    type_name,
)
from graphwire._internal.recipes import RecipeExtractor
from graphwire.exceptions import GraphWireConfigurationError


class ComponentRegistry:
    """Store component descriptors indexed by canonical capability key.

    Buckets and the descriptors inside them keep insertion order, which is the
    discovery order: single resolution picks the first descriptor of a bucket
    and collection resolution walks all of them. Registration is idempotent per
    ``(concrete type, capability)`` pair and descriptors are never removed.
    """

    def __init__(self, extractor: RecipeExtractor | None = None) -> None:
        self._extractor = extractor or RecipeExtractor()
        self._buckets: dict[str, list[ComponentDescriptor]] = {}
        self._specializations: dict[tuple[int, tuple[str, ...]], ComponentDescriptor] = {}

    @property
    def extractor(self) -> RecipeExtractor:
        return self._extractor

    def register(
        self,
        concrete_type: Any,
        capability: Any,
        recipe: Recipe | None,
        *,
        recipe_error: str | None = None,
    ) -> ComponentDescriptor:
        """Register a descriptor, or return the existing one for the same pair.

        Args:
            concrete_type: Implementation class (or factory owner).
            capability: Capability the descriptor satisfies.
            recipe: Construction recipe, or ``None`` when none qualifies.
            recipe_error: Explanation stored when ``recipe`` is ``None``.

        """
        is_template = self._is_template(concrete_type, capability, recipe)
        # templates always live under the fully erased key, even when partially bound
        key = (template_key(capability) if is_template else None) or capability_key(capability)
        bucket = self._buckets.setdefault(key, [])
        concrete_key = self._concrete_key(concrete_type, recipe, key)
        for descriptor in bucket:
            if descriptor.concrete_key == concrete_key:
                return descriptor

        descriptor = ComponentDescriptor(
            name=type_name(origin_or_self(concrete_type)),
            concrete_type=concrete_type,
            concrete_key=concrete_key,
            capability=capability,
            capability_key=key,
            recipe=recipe,
            recipe_error=recipe_error,
            is_generic_template=is_template,
        )
        bucket.append(descriptor)
        return descriptor

    def specialize(
        self,
        template: ComponentDescriptor,
        capability: Any,
    ) -> ComponentDescriptor | None:
        """Bind a generic template to the type arguments of ``capability``.

        The specialized descriptor is registered under the fully bound key and
        cached per template and argument tuple, so repeated requests for the same
        instantiation reuse it. Returns ``None`` when the template capability
        does not have the shape of ``capability``, for example ``Map[K, int]``
        requested as ``Map[str, str]``.

        Args:
            template: Descriptor with ``is_generic_template`` set.
            capability: Closed generic capability being resolved.

        Raises:
            GraphWireConfigurationError: If the template cannot be bound to the
                requested arguments.

        """
        mapping = match_typevars(template=template.capability, concrete=capability)
        if mapping is None:
            return None

        cache_key = (
            id(template),
            tuple(capability_key(argument) for argument in get_args(capability)),
        )
        cached = self._specializations.get(cache_key)
        if cached is not None:
            return cached

        concrete_type = template.concrete_type
        if isinstance(template.recipe, FactoryRecipe):
            specialized_concrete = concrete_type
        else:
            parameters = collect_typevars(concrete_type)
            unbound = [parameter for parameter in parameters if parameter not in mapping]
            if unbound:
                names = ", ".join(parameter.__name__ for parameter in unbound)
                msg = (
                    f"Generic component {template.name} has type parameters ({names}) that "
                    f"{capability_key(capability)} does not bind."
                )
                raise GraphWireConfigurationError(msg)
            specialized_concrete = rebuild_alias(
                origin=concrete_type,
                args=tuple(mapping[parameter] for parameter in parameters),
                fallback=concrete_type,
            )

        recipe = (
            None
            if template.recipe is None
            else self._extractor.specialize_recipe(
                template.recipe,
                concrete_type=specialized_concrete,
                mapping=mapping,
            )
        )
        descriptor = self.register(
            specialized_concrete,
            capability,
            recipe,
            recipe_error=template.recipe_error,
        )
        descriptor.template = template
        self._specializations[cache_key] = descriptor
        return descriptor

    def lookup(self, key: str) -> list[ComponentDescriptor]:
        """Return the descriptors registered under ``key`` (empty when none)."""
        return list(self._buckets.get(key, ()))

    def has_bucket(self, key: str) -> bool:
        return key in self._buckets

    def candidate_keys(self, capability: Any) -> list[str]:
        """Return the key forms tried for ``capability``: exact, then template."""
        keys = [capability_key(capability)]
        erased = template_key(capability)
        if erased is not None and erased not in keys:
            keys.append(erased)
        return keys

    def registrations(self) -> list[tuple[str, list[str]]]:
        """Return ``(capability key, descriptor names)`` pairs in registration order."""
        return [
            (key, [descriptor.name for descriptor in bucket])
            for key, bucket in self._buckets.items()
        ]

    def descriptors(self) -> Iterator[ComponentDescriptor]:
        for bucket in self._buckets.values():
            yield from bucket

    def initialized_instances(self) -> Iterator[ResolvedInstance]:
        """Iterate instances of every initialized descriptor across all buckets."""
        for descriptor in self.descriptors():
            if descriptor.initialized:
                yield from descriptor.instances

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def _concrete_key(self, concrete_type: Any, recipe: Recipe | None, key: str) -> str:
        if isinstance(recipe, FactoryRecipe):
            return f"{capability_key(concrete_type)}.{recipe.factory.__name__}->{key}"
        return capability_key(concrete_type)

    def _is_template(self, concrete_type: Any, capability: Any, recipe: Recipe | None) -> bool:
        if isinstance(recipe, FactoryRecipe):
            return is_open_generic(capability)
        return is_open_generic(concrete_type) or is_open_generic(capability)

