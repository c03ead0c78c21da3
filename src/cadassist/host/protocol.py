"""
The host-session contract.

Every operation in :mod:`cadassist.core` talks to the CAD application only
through an object satisfying :class:`HostDocument`. The document is passed
explicitly to each operation, so any implementation works: the build123d
backed :class:`~cadassist.host.build123d_document.Build123dDocument`, an
adapter over a commercial CAD scripting API, or a test double.

Handles (curves, edges, bodies, sketches, planes, features) are opaque to
cadassist. The only attributes read from them are ``kind`` (an
:class:`~cadassist.enums.EntityKind`) and ``name``.
"""

from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..enums import ChainRule, EntityKind


class Point3d(NamedTuple):
    """An evaluated position in model space."""
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class SectionTolerances:
    """Tolerances the host uses when building a section from rules."""
    chaining: float = 0.0001
    distance: float = 0.001
    angle: float = 0.5


@dataclass(frozen=True)
class SelectionRule:
    """How the host should gather geometry starting from ``seeds``.

    Attributes:
        rule: Gathering strategy
        seeds: Seed handles (one curve/edge for chain rules, several for dumb rules)
        angle_tolerance: Tangency tolerance in degrees (tangent rules)
        gap_tolerance: Maximum gap between chained entities
        from_inactive: Whether entities from inactive parts may be selected
    """
    rule: ChainRule
    seeds: Tuple[Any, ...]
    angle_tolerance: Optional[float] = None
    gap_tolerance: Optional[float] = None
    from_inactive: bool = False


@runtime_checkable
class FeatureHandle(Protocol):
    """A committed feature."""
    kind: EntityKind
    name: str

    def get_entities(self) -> List[Any]: ...


class Builder(Protocol):
    """A transient object collecting parameters for one pending feature."""

    def commit(self) -> FeatureHandle: ...

    def destroy(self) -> None: ...


class ExtrudeBuilder(Builder, Protocol):
    direction: Any
    start_distance: float
    end_distance: float
    solid: bool

    def add_to_section(self, rules: Sequence[SelectionRule], seed: Any,
                       tolerances: SectionTolerances) -> None: ...


class BooleanBuilder(Builder, Protocol):
    target: Any
    tools: List[Any]
    copy_tools: bool


class ExtractBuilder(Builder, Protocol):
    inherit_material: bool
    associative: bool
    hide_original: bool

    def replace_rules(self, rules: Sequence[SelectionRule]) -> None: ...


class TrimBuilder(Builder, Protocol):
    tolerance: float
    distance_tolerance: float
    chaining_tolerance: float
    reverse_direction: bool

    def set_target(self, rules: Sequence[SelectionRule]) -> None: ...

    def set_tool(self, rules: Sequence[SelectionRule]) -> None: ...


class OffsetBuilder(Builder, Protocol):
    distance: float
    fit_tolerance: float
    angle_tolerance: float
    reverse_direction: bool
    rough: bool

    def add_to_section(self, rules: Sequence[SelectionRule], seed: Any) -> None: ...


class ProjectBuilder(Builder, Protocol):
    fit_tolerance: float
    angle_tolerance: float

    def add_to_section(self, rules: Sequence[SelectionRule], seed: Any,
                       tolerances: SectionTolerances) -> None: ...

    def add_target(self, rules: Sequence[SelectionRule]) -> None: ...


@runtime_checkable
class HostDocument(Protocol):
    """The live document of a host CAD session."""

    # Undo checkpoints
    def set_checkpoint(self, name: str, visible: bool = True) -> Any: ...

    def rename_checkpoint(self, mark: Any, name: str) -> None: ...

    def rollback_to(self, mark: Any) -> None: ...

    def release_checkpoint(self, mark: Any) -> None: ...

    # Lookup
    def find_body(self, name: str) -> Optional[Any]: ...

    def sketch_geometry(self, sketch: Any) -> List[Any]: ...

    # Builders
    def create_extrude_builder(self) -> ExtrudeBuilder: ...

    def create_boolean_builder(self) -> BooleanBuilder: ...

    def create_extract_builder(self) -> ExtractBuilder: ...

    def create_trim_builder(self) -> TrimBuilder: ...

    def create_offset_builder(self) -> OffsetBuilder: ...

    def create_project_builder(self) -> ProjectBuilder: ...

    # Measurement and evaluation
    def body_volume(self, body: Any, accuracy: float) -> float: ...

    def curve_length(self, curve: Any) -> float: ...

    def curve_ends(self, curve: Any) -> Tuple[Point3d, Point3d]: ...

    def evaluate_curve(self, curve: Any, fraction: float) -> Point3d: ...

    def minimum_distance(self, first: Any, second: Any) -> float: ...

    # Display
    def set_color(self, entity: Any, color: int) -> None: ...

    # Message log
    def write_listing(self, line: str) -> None: ...


def kind_of(handle: Any) -> Optional[EntityKind]:
    """Return the EntityKind of a handle, or None for foreign objects."""
    return getattr(handle, "kind", None)
