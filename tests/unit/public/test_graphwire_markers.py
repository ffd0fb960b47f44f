from __future__ import annotations

from typing import Annotated, get_args, get_origin

from graphwire import All, wire, wirer
from graphwire.markers import (
    AllMarker,
    WireTag,
    is_all_annotation,
    is_wirer,
    strip_all_annotation,
    wire_tags,
)


class _IService:
    pass


class _IOther:
    pass


@wire
class _Service(_IService):
    pass


@wire(provides=_IService)
@wire(provides=_IOther)
class _TwiceTagged(_IService, _IOther):
    pass


class _Subclass(_Service):
    pass


@wirer
class _Owner:
    @staticmethod
    def wire() -> _IService:
        return _Service()


class _OwnerSubclass(_Owner):
    pass


def test_bare_wire_registers_under_implemented_capabilities() -> None:
    assert wire_tags(_Service) == (WireTag(provides=None),)


def test_stacked_wire_tags_accumulate_in_application_order() -> None:
    assert wire_tags(_TwiceTagged) == (WireTag(provides=_IOther), WireTag(provides=_IService))


def test_wire_tags_are_not_inherited() -> None:
    assert wire_tags(_Subclass) == ()


def test_wirer_tag_is_not_inherited() -> None:
    assert is_wirer(_Owner)
    assert not is_wirer(_OwnerSubclass)
    assert not is_wirer(_Service)


def test_all_annotation_is_annotated_tuple() -> None:
    annotation = All[_IService]

    assert get_origin(annotation) is Annotated
    assert get_args(annotation) == (tuple[_IService, ...], AllMarker(capability=_IService))
    assert is_all_annotation(annotation)
    assert strip_all_annotation(annotation) is _IService


def test_plain_annotations_are_not_all_annotations() -> None:
    assert not is_all_annotation(tuple[_IService, ...])
    assert not is_all_annotation(Annotated[_IService, "other"])
    assert strip_all_annotation(_IService) is _IService
