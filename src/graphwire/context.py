from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager, nullcontext
from typing import TYPE_CHECKING, Any, TypeAlias, TypeVar, cast
from unittest.mock import create_autospec

from graphwire._internal.engine import ResolutionEngine, SubstituteFactory, Substitution
from graphwire._internal.keys import capability_key, origin_or_self, type_name
from graphwire._internal.recipes import RecipeExtractor
from graphwire._internal.registry import ComponentRegistry
from graphwire._internal.transcript import TranscriptRecorder, TranscriptRenderer
from graphwire.discovery import DiscoverySource, DiscoveryUnit, FactoryType, PackageScanner, TaggedType
from graphwire.exceptions import GraphWireConfigurationError, GraphWireDiscoveryError
from graphwire.lock_mode import LockMode
from graphwire.settings import ContextSettings

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

DiscoveryErrorHandler: TypeAlias = Callable[[GraphWireDiscoveryError], None]

logger = logging.getLogger(__name__)


def log_discovery_error(error: GraphWireDiscoveryError) -> None:
    """Log a discovery error with its cause and continue."""
    logger.warning("%s", error, exc_info=error)


def autospec_substitute(capability: Any) -> Any:
    """Return a ``create_autospec`` double for ``capability``."""
    return create_autospec(origin_or_self(capability), instance=True)


class ExecutionContext:
    """Own a component registry and lazily build the object graph it describes.

    Components are discovered on first use. Every concrete type is constructed
    at most once per context, no matter how many capabilities it is resolved
    through. Discovery failures are reported to ``on_discovery_error`` handlers
    and never stop the remaining components from registering.

    Examples:
        .. code-block:: python

            context = ExecutionContext.create(["app"])
            host = context.resolve(IHost)
            plugins = context.resolve_all(IPlugin)
            source = context.emit_transcript_for(IHost)

    """

    def __init__(
        self,
        discovery: DiscoverySource | None = None,
        *,
        packages: Sequence[str] = (),
        settings: ContextSettings | None = None,
        substitution: Substitution | None = None,
    ) -> None:
        """Initialize a context without discovering anything yet.

        Args:
            discovery: Source of components. Defaults to a ``PackageScanner``
                over ``packages`` honouring ``exclude_prefixes``.
            packages: Packages scanned when ``discovery`` is omitted.
            settings: Context settings. Defaults to ``ContextSettings()``.
            substitution: Substitution used by ``for_test`` contexts.

        """
        self._settings = settings if settings is not None else ContextSettings()
        self.exclude_prefixes: list[str] = list(self._settings.exclude_prefixes)
        self._discovery = (
            discovery
            if discovery is not None
            else PackageScanner(packages, exclude_prefixes=self.exclude_prefixes)
        )
        self._extractor = RecipeExtractor()
        self._registry = ComponentRegistry(self._extractor)
        self._engine = ResolutionEngine(self._registry, substitution=substitution)
        self._recorder = TranscriptRecorder()
        self._renderer = TranscriptRenderer()
        self._discovery_error_handlers: list[DiscoveryErrorHandler] = []
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if self._settings.lock_mode is LockMode.THREAD else nullcontext()
        )
        self._is_set_up = False

    @classmethod
    def create(
        cls,
        packages: Sequence[str] | None = None,
        *,
        discovery: DiscoverySource | None = None,
        settings: ContextSettings | None = None,
    ) -> Self:
        """Create a context that builds a live object graph.

        Args:
            packages: Packages to scan. Defaults to ``settings.packages``.
            discovery: Explicit discovery source; overrides ``packages``.
            settings: Context settings. Defaults to values read from the
                environment.

        """
        resolved_settings = settings if settings is not None else ContextSettings()
        return cls(
            discovery,
            packages=resolved_settings.packages if packages is None else packages,
            settings=resolved_settings,
        )

    @classmethod
    def for_test(
        cls,
        root: Any,
        substitute: SubstituteFactory | None = None,
        *,
        packages: Sequence[str] | None = None,
        discovery: DiscoverySource | None = None,
        settings: ContextSettings | None = None,
    ) -> Self:
        """Create a context that builds ``root`` for real and substitutes the rest.

        Every other capability met while materializing is passed to
        ``substitute``; a non-``None`` result is used verbatim instead of
        building the component. ``None`` falls back to genuine construction.

        Args:
            root: Capability under test, always genuinely constructed.
            substitute: Stand-in factory. Defaults to ``create_autospec`` doubles.
            packages: Packages to scan. Defaults to ``settings.packages``.
            discovery: Explicit discovery source; overrides ``packages``.
            settings: Context settings. Defaults to values read from the
                environment.

        Examples:
            .. code-block:: python

                context = ExecutionContext.for_test(IHost, discovery=discovery)
                host = context.resolve(IHost)
                host.plugins[0].run.assert_not_called()

        """
        resolved_settings = settings if settings is not None else ContextSettings()
        substitution = Substitution(
            root_key=capability_key(root),
            factory=substitute if substitute is not None else autospec_substitute,
        )
        return cls(
            discovery,
            packages=resolved_settings.packages if packages is None else packages,
            settings=resolved_settings,
            substitution=substitution,
        )

    @property
    def settings(self) -> ContextSettings:
        return self._settings

    @property
    def is_substituting(self) -> bool:
        return self._engine.substitution is not None

    def on_discovery_error(self, handler: DiscoveryErrorHandler) -> Self:
        """Add a handler receiving every discovery error.

        Handlers replace the default logging handler. Add them before the first
        resolution, since discovery runs only once.

        Args:
            handler: Callable receiving a ``GraphWireDiscoveryError``. Raising
                from it aborts discovery.

        """
        self._discovery_error_handlers.append(handler)
        return self

    def resolve(self, capability: type[T]) -> T:
        """Resolve the first registered implementation of ``capability``.

        Args:
            capability: Capability type, possibly a closed generic.

        Raises:
            GraphWireNotFoundError: If nothing is registered for ``capability``.
            GraphWireConfigurationError: If a component in the graph cannot be built.
            GraphWireCycleError: If the graph contains a dependency cycle.

        """
        with self._lock:
            self._ensure_setup()
            return cast("T", self._engine.resolve_one(capability, self._recorder).value)

    def resolve_all(self, capability: type[T]) -> tuple[T, ...]:
        """Resolve every registered implementation of ``capability`` in discovery order.

        Returns an empty tuple when nothing is registered.

        Args:
            capability: Capability type, possibly a closed generic.

        """
        with self._lock:
            self._ensure_setup()
            instances = self._engine.resolve_all(capability, self._recorder)
            return tuple(cast("T", instance.value) for instance in instances)

    def list_registrations(self) -> list[tuple[str, list[str]]]:
        """Return ``(capability key, component names)`` pairs in registration order."""
        with self._lock:
            self._ensure_setup()
            return self._registry.registrations()

    def emit_transcript_for(self, capability: Any) -> str:
        """Return Python source that rebuilds the graph rooted at ``capability``.

        The module defines one function, named by
        ``settings.transcript_function_name``, that constructs every component
        the root depends on in the order this context built them and returns
        the root.

        Args:
            capability: Root capability.

        Raises:
            GraphWireConfigurationError: If this context substitutes components,
                or a component type cannot be imported by name.

        """
        if self.is_substituting:
            msg = "Transcripts cannot be emitted from a substitution context."
            raise GraphWireConfigurationError(msg)

        with self._lock:
            self._ensure_setup()
            root = self._engine.resolve_one(capability, self._recorder)
            return self._renderer.render(
                recorder=self._recorder,
                root=root,
                capability=capability,
                function_name=self._settings.transcript_function_name,
            )

    def _ensure_setup(self) -> None:
        if self._is_set_up:
            return
        self._register_discovered()
        self._is_set_up = True
        logger.info(
            "Registered %d components for %d capabilities",
            len(self._registry),
            len(self._registry.registrations()),
        )

    def _register_discovered(self) -> None:
        units: list[DiscoveryUnit] = []
        try:
            units.extend(self._discovery.units())
        except Exception as error:  # noqa: BLE001
            self._report_discovery_error(type_name(type(self._discovery)), error)

        for unit in units:
            try:
                tagged_types = list(unit.tagged_types())
            except Exception as error:  # noqa: BLE001
                self._report_discovery_error(unit.name, error)
                continue
            for tagged in tagged_types:
                try:
                    self._register_tagged(tagged)
                except Exception as error:  # noqa: BLE001
                    self._report_discovery_error(type_name(tagged.concrete_type), error)

        for unit in units:
            try:
                factory_types = list(unit.factory_types())
            except Exception as error:  # noqa: BLE001
                self._report_discovery_error(unit.name, error)
                continue
            for factory_type in factory_types:
                try:
                    self._register_factory(factory_type)
                except Exception as error:  # noqa: BLE001
                    self._report_discovery_error(type_name(factory_type.owner), error)

    def _register_tagged(self, tagged: TaggedType) -> None:
        recipe, recipe_error = self._extractor.constructor_recipe(tagged.concrete_type)
        capabilities = (
            (tagged.capability,)
            if tagged.capability is not None
            else self._extractor.implemented_capabilities(tagged.concrete_type)
        )
        for capability in capabilities:
            self._registry.register(
                tagged.concrete_type,
                capability,
                recipe,
                recipe_error=recipe_error,
            )

    def _register_factory(self, factory_type: FactoryType) -> None:
        capability, recipe = self._extractor.factory_recipe(factory_type.owner)
        self._registry.register(factory_type.owner, capability, recipe)

    def _report_discovery_error(self, subject: str, error: Exception) -> None:
        discovery_error = GraphWireDiscoveryError(subject, error)
        discovery_error.__cause__ = error
        handlers = self._discovery_error_handlers or [log_discovery_error]
        for handler in handlers:
            handler(discovery_error)
