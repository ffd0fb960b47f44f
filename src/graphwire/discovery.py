from __future__ import annotations

import importlib
import logging
import pkgutil
from collections.abc import Iterable, Iterator, Sequence
from types import ModuleType
from typing import Any, NamedTuple, Protocol, runtime_checkable

from graphwire.markers import is_wirer, wire_tags

logger = logging.getLogger(__name__)


class TaggedType(NamedTuple):
    """A concrete type found by discovery.

    ``capability`` is ``None`` when the type should be registered under every
    capability it implements.
    """

    concrete_type: type[Any]
    capability: Any | None = None


class FactoryType(NamedTuple):
    """A ``@wirer`` owner whose static ``wire`` function produces instances."""

    owner: type[Any]


@runtime_checkable
class DiscoveryUnit(Protocol):
    """One enumerable unit of discovery, typically a module."""

    @property
    def name(self) -> str: ...

    def tagged_types(self) -> Iterable[TaggedType]: ...

    def factory_types(self) -> Iterable[FactoryType]: ...


@runtime_checkable
class DiscoverySource(Protocol):
    """Enumerate the units the context registers components from.

    The context drains ``units()`` once, on first use. Every exception raised
    while enumerating a unit or registering one of its items is reported to the
    context's discovery error handler and processing continues.
    """

    def units(self) -> Iterable[DiscoveryUnit]: ...


class StaticUnit:
    """Discovery unit backed by explicit lists of types."""

    def __init__(
        self,
        name: str,
        *,
        tagged: Iterable[type[Any] | TaggedType] = (),
        factories: Iterable[type[Any]] = (),
    ) -> None:
        self._name = name
        self._tagged = tuple(tagged)
        self._factories = tuple(factories)

    @property
    def name(self) -> str:
        return self._name

    def tagged_types(self) -> Iterator[TaggedType]:
        for item in self._tagged:
            if isinstance(item, TaggedType):
                yield item
                continue
            tags = wire_tags(item)
            if not tags:
                yield TaggedType(concrete_type=item)
                continue
            for tag in tags:
                yield TaggedType(concrete_type=item, capability=tag.provides)

    def factory_types(self) -> Iterator[FactoryType]:
        for owner in self._factories:
            yield FactoryType(owner=owner)


class StaticDiscovery:
    """Discover components from explicit lists.

    Plain classes in ``tagged`` are registered under every capability they
    implement; classes carrying ``@wire`` tags follow their tags.

    Examples:
        .. code-block:: python

            discovery = StaticDiscovery(
                tagged=[SqlUserRepository, TaggedType(EmailNotifier, Notifier)],
                factories=[ConsoleCommands],
            )
            context = ExecutionContext.create(discovery=discovery)

    """

    def __init__(
        self,
        *,
        tagged: Iterable[type[Any] | TaggedType] = (),
        factories: Iterable[type[Any]] = (),
        name: str = "static",
    ) -> None:
        self._unit = StaticUnit(name, tagged=tagged, factories=factories)

    def units(self) -> Iterator[DiscoveryUnit]:
        yield self._unit


class ModuleUnit:
    """Discovery unit for one importable module.

    The module is imported on first access. An import failure is raised from
    ``tagged_types`` once; ``factory_types`` of a failed module yields nothing.
    """

    def __init__(self, module_name: str, *, error: BaseException | None = None) -> None:
        self._module_name = module_name
        self._module: ModuleType | None = None
        self._error = error

    @property
    def name(self) -> str:
        return self._module_name

    def tagged_types(self) -> Iterator[TaggedType]:
        module = self._load()
        for candidate in self._defined_classes(module):
            for tag in wire_tags(candidate):
                yield TaggedType(concrete_type=candidate, capability=tag.provides)

    def factory_types(self) -> Iterator[FactoryType]:
        if self._error is not None:
            return
        module = self._load()
        for candidate in self._defined_classes(module):
            if is_wirer(candidate):
                yield FactoryType(owner=candidate)

    def _load(self) -> ModuleType:
        if self._error is not None:
            raise self._error
        if self._module is None:
            try:
                self._module = importlib.import_module(self._module_name)
            except Exception as error:
                self._error = error
                raise
            logger.debug("Imported module %s for discovery", self._module_name)
        return self._module

    def _defined_classes(self, module: ModuleType) -> Iterator[type[Any]]:
        for value in list(vars(module).values()):
            if isinstance(value, type) and value.__module__ == module.__name__:
                yield value


class PackageScanner:
    """Discover ``@wire`` and ``@wirer`` classes by walking packages.

    Every module of the given packages (recursively) is a unit, except modules
    whose dotted name starts with one of ``exclude_prefixes``. Excluded
    subpackages are never imported, so their ``__init__`` side effects do not
    run. Only classes defined in a module are considered, so re-exports are
    not registered twice.

    Args:
        packages: Importable package or module names to walk.
        exclude_prefixes: Dotted-name prefixes to skip. The sequence is read
            when units are enumerated, so later mutations are honoured.

    """

    def __init__(
        self,
        packages: Iterable[str],
        *,
        exclude_prefixes: Sequence[str] = (),
    ) -> None:
        self._packages = tuple(packages)
        self._exclude_prefixes = exclude_prefixes

    def units(self) -> Iterator[DiscoveryUnit]:
        seen: set[str] = set()
        for package_name in self._packages:
            for unit in self._package_units(package_name):
                if unit.name in seen or self._is_excluded(unit.name):
                    continue
                seen.add(unit.name)
                yield unit

    def _package_units(self, package_name: str) -> Iterator[ModuleUnit]:
        if self._is_excluded(package_name):
            return
        try:
            package = importlib.import_module(package_name)
        except Exception as error:  # noqa: BLE001
            yield ModuleUnit(package_name, error=error)
            return

        yield ModuleUnit(package_name)
        search_path = getattr(package, "__path__", None)
        if search_path is None:
            return

        # exclusions are checked before a subpackage is imported to be descended into
        for module_info in pkgutil.iter_modules(search_path, prefix=f"{package.__name__}."):
            if self._is_excluded(module_info.name):
                logger.debug("Skipping excluded module %s", module_info.name)
                continue
            if module_info.ispkg:
                yield from self._package_units(module_info.name)
            else:
                yield ModuleUnit(module_info.name)

    def _is_excluded(self, module_name: str) -> bool:
        return any(module_name.startswith(prefix) for prefix in self._exclude_prefixes)
