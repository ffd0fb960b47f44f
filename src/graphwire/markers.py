from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, get_args, get_origin, overload

T = TypeVar("T")
C = TypeVar("C", bound=type[Any])

WIRE_TAGS_ATTR = "__graphwire_wire__"
WIRER_TAG_ATTR = "__graphwire_wirer__"
WIRER_FACTORY_NAME = "wire"
_ANNOTATED_MARKER_MIN_ARGS = 2


class WireTag(NamedTuple):
    """Discovery tag attached to a class by ``@wire``.

    ``provides`` is ``None`` when the class should be registered under every
    capability it implements.
    """

    provides: Any | None


class AllMarker(NamedTuple):
    """Marker for collecting every implementation registered for a capability."""

    capability: Any


if TYPE_CHECKING:
    All = tuple[T, ...]
    """Resolve all implementations registered for a capability.

    ``All[T]`` type-checks as ``tuple[T, ...]`` and always resolves to a tuple.
    It resolves to an empty tuple when nothing is registered for ``T``.
    """

else:

    class All:
        """Resolve all implementations registered for a capability.

        At runtime ``All[T]`` resolves to ``Annotated[tuple[T, ...], AllMarker(T)]``.

        Examples:
            .. code-block:: python

                @wire
                class Host(IHost):
                    def __init__(self, plugins: All[IPlugin]) -> None:
                        self.plugins = plugins

        """

        def __class_getitem__(cls, item: Any) -> Any:
            return Annotated[tuple[item, ...], AllMarker(capability=item)]


def is_all_annotation(annotation: Any) -> bool:
    """Return True when annotation is ``Annotated[..., AllMarker(...)]``."""
    return _extract_all_marker(annotation) is not None


def strip_all_annotation(annotation: Any) -> Any:
    """Return the capability wrapped by an ``All[...]`` annotation."""
    marker = _extract_all_marker(annotation)
    if marker is None:
        return annotation
    return marker.capability


def _extract_all_marker(annotation: Any) -> AllMarker | None:
    if get_origin(annotation) is not Annotated:
        return None
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    return next(
        (item for item in annotation_args[1:] if isinstance(item, AllMarker)),
        None,
    )


@overload
def wire(concrete_type: C, /) -> C: ...


@overload
def wire(*, provides: Any) -> Callable[[C], C]: ...


def wire(concrete_type: C | None = None, /, *, provides: Any | None = None) -> C | Callable[[C], C]:
    """Tag a class for discovery.

    Without ``provides`` the class is registered under every capability it
    implements. With ``provides`` it is registered under that capability only.
    Tags are stored on the class itself and are not inherited by subclasses.

    Args:
        concrete_type: Class to tag when used as a bare decorator.
        provides: Explicit capability to register the class under.

    Examples:
        .. code-block:: python

            @wire
            class SqlUserRepository(UserRepository): ...


            @wire(provides=Notifier)
            class EmailNotifier(Notifier, Closeable): ...

    """

    def decorator(decorated: C) -> C:
        existing: tuple[WireTag, ...] = decorated.__dict__.get(WIRE_TAGS_ATTR, ())
        setattr(decorated, WIRE_TAGS_ATTR, (*existing, WireTag(provides=provides)))
        return decorated

    if concrete_type is None:
        return decorator
    return decorator(concrete_type)


def wirer(owner: C) -> C:
    """Tag a class that owns a static multi-binding ``wire`` factory.

    The factory's parameters are resolved like constructor parameters. Its
    return annotation decides the capability: ``X`` registers a single
    instance, ``tuple[X, ...]`` or ``list[X]`` registers every returned item.

    Examples:
        .. code-block:: python

            @wirer
            class ConsoleCommands:
                @staticmethod
                def wire(commands: All[Command]) -> tuple[ConsoleCommand, ...]:
                    return tuple(ConsoleCommand(command) for command in commands)

    """
    setattr(owner, WIRER_TAG_ATTR, True)
    return owner


def wire_tags(candidate: type[Any]) -> tuple[WireTag, ...]:
    """Return the ``@wire`` tags declared directly on ``candidate``."""
    return candidate.__dict__.get(WIRE_TAGS_ATTR, ())


def is_wirer(candidate: type[Any]) -> bool:
    """Return True when ``@wirer`` was applied directly to ``candidate``."""
    return bool(candidate.__dict__.get(WIRER_TAG_ATTR, False))
