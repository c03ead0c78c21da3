"""
A host document backed by build123d / OpenCascade.

Holds named bodies, curves, sketches and planes, implements the builder
objects of :mod:`cadassist.host.protocol` on top of build123d operations,
and keeps undo checkpoints as snapshots of the entity table. build123d
shapes are immutable values, so a snapshot only has to remember which
shape every entity pointed to.

Example:
    >>> from build123d import Box, Plane
    >>> from cadassist.host import Build123dDocument
    >>> from cadassist.core import trim_body_small_cut
    >>>
    >>> doc = Build123dDocument()
    >>> doc.add_body("block", Box(10, 10, 10))
    >>> doc.add_body("panel", Plane.XY.offset(3) * Box(20, 20, 0.1))
    >>> result = trim_body_small_cut(doc, "block", "panel", reverse=False)
    >>> result.satisfied, round(result.value.removed_percent)
    (True, 20)
"""

import copy
import itertools
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from build123d import (
    Compound,
    Edge,
    Face,
    GeomType,
    Keep,
    Kind,
    Plane,
    Pos,
    Side,
    Vector,
    Wire,
    export_step,
    extrude,
    import_step,
    make_face,
    split,
)
from OCP.BRepProj import BRepProj_Projection
from OCP.gp import gp_Dir

from ..enums import ChainRule, EntityKind
from .protocol import Point3d, SectionTolerances, SelectionRule

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Entity:
    """A named handle into the document.

    Attributes:
        kind: What the handle refers to
        name: Unique name within the document (derived handles share their owner's prefix)
        shape: build123d shape (a Plane for PLANE entities)
        owner: Body an EDGE belongs to
        color: Display color index, None for the default
    """
    kind: EntityKind
    name: str
    shape: Any
    owner: Optional["Entity"] = None
    color: Optional[int] = None

    def __repr__(self):
        return f"Entity({self.kind.value}, {self.name!r})"


@dataclass(eq=False)
class Feature:
    """Result of one committed builder."""
    name: str
    entities: List[Entity] = field(default_factory=list)
    kind: EntityKind = EntityKind.FEATURE

    def get_entities(self) -> List[Entity]:
        return list(self.entities)


@dataclass
class _Mark:
    name: str
    visible: bool
    snapshot: Dict[str, Tuple[Entity, Any]]


class _Builder:
    """Common builder state: section, destroy guard."""

    feature_prefix = "FEATURE"

    def __init__(self, document: "Build123dDocument"):
        self.document = document
        self.destroyed = False
        self.section_rules: List[SelectionRule] = []
        self.section_tolerances = SectionTolerances()

    def add_to_section(self, rules, seed, tolerances: Optional[SectionTolerances] = None) -> None:
        self.section_rules.extend(rules)
        if tolerances is not None:
            self.section_tolerances = tolerances

    def destroy(self) -> None:
        if self.destroyed:
            raise RuntimeError(f"{type(self).__name__} destroyed twice")
        self.destroyed = True

    def commit(self) -> Any:
        if self.destroyed:
            raise RuntimeError(f"{type(self).__name__} used after destroy")
        return self._commit()

    def _commit(self) -> Any:
        raise NotImplementedError

    def _section_edges(self) -> List[Edge]:
        return self.document.gather_edges(self.section_rules, self.section_tolerances)


class ExtrudeBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.direction: Any = (0, 0, 1)
        self.start_distance = 0.0
        self.end_distance = 0.0
        self.solid = True

    def _commit(self) -> Feature:
        edges = self._section_edges()
        if not edges:
            raise ValueError("Extrude section is empty")
        faces = _faces_from_edges(edges, self.section_tolerances.distance)

        direction = Vector(*self.direction).normalized()
        length = self.end_distance - self.start_distance
        if length <= 0:
            raise ValueError(
                f"Extrude end ({self.end_distance}) must lie beyond start ({self.start_distance})"
            )
        start = direction * self.start_distance
        moved = [Pos(start.X, start.Y, start.Z) * face for face in faces]
        part = extrude(moved, amount=length, dir=direction)

        body = self.document.add_body(self.document.next_name("EXTRUDE"), part)
        return Feature(body.name, [body])


class BooleanBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.target: Optional[Entity] = None
        self.tools: List[Entity] = []
        self.copy_tools = False

    def _commit(self) -> Feature:
        if self.target is None or not self.tools:
            raise ValueError("Boolean needs a target and at least one tool")
        result = self.target.shape.cut(*[tool.shape for tool in self.tools])
        if not result.solids():
            raise ValueError("Subtraction leaves no solid")
        self.target.shape = result
        if not self.copy_tools:
            for tool in self.tools:
                self.document.remove(tool.name)
        return Feature(self.document.next_name("SUBTRACT"), [self.target])


class ExtractBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.inherit_material = True
        self.associative = True
        self.hide_original = False
        self.rules: List[SelectionRule] = []

    def replace_rules(self, rules) -> None:
        self.rules = list(rules)

    def _commit(self) -> Entity:
        shapes = [entity.shape for rule in self.rules for entity in rule.seeds]
        if not shapes:
            raise ValueError("Nothing selected for extraction")
        if len(shapes) == 1:
            shape = copy.copy(shapes[0])
        else:
            shape = shapes[0].fuse(*shapes[1:])
        return self.document.add_body(self.document.next_name("EXTRACT_BODY"), shape)


class TrimBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.tolerance = 0.01
        self.distance_tolerance = 0.01
        self.chaining_tolerance = 0.0095
        self.reverse_direction = False
        self.target_rules: List[SelectionRule] = []
        self.tool_rules: List[SelectionRule] = []

    def set_target(self, rules) -> None:
        self.target_rules = list(rules)

    def set_tool(self, rules) -> None:
        self.tool_rules = list(rules)

    def _commit(self) -> Feature:
        if not self.target_rules or not self.tool_rules:
            raise ValueError("Trim needs a target body and a tool")
        target = self.target_rules[0].seeds[0]
        tool = self.tool_rules[0].seeds[0]

        keep = Keep.BOTTOM if self.reverse_direction else Keep.TOP
        trimmed = split(target.shape, bisect_by=_cutting_tool(tool), keep=keep)
        if not trimmed.solids():
            raise ValueError("Trim removes the whole body")
        target.shape = trimmed
        return Feature(self.document.next_name("TRIM_BODY"), [target])


class OffsetBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.distance = 0.0
        self.fit_tolerance = 0.01
        self.angle_tolerance = 0.5
        self.reverse_direction = False
        self.rough = True

    def _commit(self) -> Feature:
        edges = self._section_edges()
        if not edges:
            raise ValueError("Offset section is empty")
        if self.distance == 0:
            raise ValueError("Offset distance must be non-zero")

        curves = []
        for wire in Wire.combine(edges, tol=self.fit_tolerance):
            if wire.is_closed:
                amount = -self.distance if self.reverse_direction else self.distance
                offset = wire.offset_2d(amount, kind=Kind.INTERSECTION)
            else:
                side = Side.RIGHT if self.reverse_direction else Side.LEFT
                offset = wire.offset_2d(self.distance, kind=Kind.INTERSECTION,
                                        side=side, closed=False)
            for edge in offset.edges():
                curves.append(self.document.add_curve(self.document.next_name("OFFSET_CURVE"), edge))
        return Feature(self.document.next_name("OFFSET"), curves)


class ProjectBuilder(_Builder):
    def __init__(self, document):
        super().__init__(document)
        self.fit_tolerance = 0.01
        self.angle_tolerance = 0.5
        self.target_rules: List[SelectionRule] = []

    def add_target(self, rules) -> None:
        self.target_rules.extend(rules)

    def _commit(self) -> Feature:
        edges = self._section_edges()
        if not edges:
            raise ValueError("Projection section is empty")
        if not self.target_rules:
            raise ValueError("Projection needs a target plane")
        plane = _as_plane(self.target_rules[0].seeds[0])

        size = 2 * Compound(edges).bounding_box().diagonal + 1000.0
        target = Face.make_rect(size, size, plane)
        normal = gp_Dir(plane.z_dir.X, plane.z_dir.Y, plane.z_dir.Z)

        curves = []
        for wire in Wire.combine(edges, tol=self.section_tolerances.distance):
            projection = BRepProj_Projection(wire.wrapped, target.wrapped, normal)
            while projection.More():
                for edge in Wire(projection.Current()).edges():
                    curves.append(
                        self.document.add_curve(self.document.next_name("PROJECT_CURVE"), edge)
                    )
                projection.Next()
        if not curves:
            raise ValueError("Projection produced no curves")
        return Feature(self.document.next_name("PROJECT"), curves)


def _faces_from_edges(edges: List[Edge], tolerance: float) -> List[Face]:
    faces = []
    for wire in Wire.combine(edges, tol=tolerance):
        if not wire.is_closed:
            raise ValueError("Extrude section is not closed")
        faces.extend(make_face(wire.edges()).faces())
    return faces


def _as_plane(entity: Entity) -> Plane:
    if isinstance(entity.shape, Plane):
        return entity.shape
    return Plane(entity.shape)


def _cutting_tool(tool: Entity) -> Union[Plane, Face]:
    """Largest planar face of the tool as an infinite plane, else its largest face."""
    if isinstance(tool.shape, Plane):
        return tool.shape
    faces = tool.shape.faces()
    if not faces:
        raise ValueError(f"Tool {tool.name} has no faces")
    planar = faces.filter_by(GeomType.PLANE)
    if planar:
        return Plane(max(planar, key=lambda f: f.area))
    return max(faces, key=lambda f: f.area)


def _ends(edge: Edge) -> Tuple[Vector, Vector]:
    return edge.position_at(0), edge.position_at(1)


def _tangent_at_joint(a: Edge, a_end: int, b: Edge, b_end: int, angle_tolerance: float) -> bool:
    ta = a.tangent_at(a_end)
    tb = b.tangent_at(b_end)
    cosine = min(1.0, abs(ta.normalized().dot(tb.normalized())))
    return math.degrees(math.acos(cosine)) <= angle_tolerance


class Build123dDocument:
    """A HostDocument implementation over build123d shapes."""

    def __init__(self):
        self._entities: Dict[str, Entity] = {}
        self._marks: Dict[int, _Mark] = {}
        self._mark_ids = itertools.count(1)
        self._counters: Dict[str, int] = {}
        self.listing: List[str] = []

    # ─── Entity table ────────────────────────────────────────────────────

    def next_name(self, prefix: str) -> str:
        count = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = count
        return f"{prefix}({count})"

    def _add(self, kind: EntityKind, name: str, shape: Any) -> Entity:
        if name in self._entities:
            raise ValueError(f"Document already has an entity named {name!r}")
        entity = Entity(kind, name, shape)
        self._entities[name] = entity
        return entity

    def add_body(self, name: str, shape: Any) -> Entity:
        return self._add(EntityKind.BODY, name, shape)

    def add_curve(self, name: str, edge: Edge) -> Entity:
        return self._add(EntityKind.CURVE, name, edge)

    def add_sketch(self, name: str, shape: Any) -> Entity:
        return self._add(EntityKind.SKETCH, name, shape)

    def add_plane(self, name: str, plane: Plane) -> Entity:
        return self._add(EntityKind.PLANE, name, plane)

    def get(self, name: str) -> Optional[Entity]:
        return self._entities.get(name)

    def remove(self, name: str) -> None:
        self._entities.pop(name, None)

    def entities(self, kind: Optional[EntityKind] = None) -> List[Entity]:
        return [e for e in self._entities.values() if kind is None or e.kind == kind]

    def body_edges(self, body: Entity) -> List[Entity]:
        """Edges of a body as EDGE handles (derived, not stored in the table)."""
        return [
            Entity(EntityKind.EDGE, f"{body.name}/EDGE({i})", edge, owner=body)
            for i, edge in enumerate(body.shape.edges(), start=1)
        ]

    # ─── Checkpoints ─────────────────────────────────────────────────────

    def set_checkpoint(self, name: str, visible: bool = True) -> int:
        mark = next(self._mark_ids)
        snapshot = {key: (entity, entity.shape) for key, entity in self._entities.items()}
        self._marks[mark] = _Mark(name, visible, snapshot)
        logger.debug(f"Checkpoint {mark} '{name}' set")
        return mark

    def rename_checkpoint(self, mark: int, name: str) -> None:
        self._marks[mark].name = name

    def rollback_to(self, mark: int) -> None:
        snapshot = self._marks[mark].snapshot
        self._entities = {}
        for key, (entity, shape) in snapshot.items():
            entity.shape = shape
            self._entities[key] = entity
        logger.debug(f"Rolled back to checkpoint {mark} '{self._marks[mark].name}'")

    def release_checkpoint(self, mark: int) -> None:
        del self._marks[mark]

    @property
    def open_checkpoints(self) -> int:
        return len(self._marks)

    # ─── Lookup ──────────────────────────────────────────────────────────

    def find_body(self, name: str) -> Optional[Entity]:
        entity = self._entities.get(name)
        if entity is not None and entity.kind == EntityKind.BODY:
            return entity
        return None

    def sketch_geometry(self, sketch: Entity) -> List[Entity]:
        return [
            Entity(EntityKind.CURVE, f"{sketch.name}/CURVE({i})", edge)
            for i, edge in enumerate(sketch.shape.edges(), start=1)
        ]

    def gather_edges(self, rules: Iterable[SelectionRule],
                     tolerances: SectionTolerances) -> List[Edge]:
        """Resolve selection rules into a list of distinct edges."""
        gathered: List[Edge] = []
        for rule in rules:
            for edge in self._resolve(rule, tolerances):
                if not any(edge.is_same(other) for other in gathered):
                    gathered.append(edge)
        return gathered

    def _resolve(self, rule: SelectionRule, tolerances: SectionTolerances) -> List[Edge]:
        if rule.rule in (ChainRule.CURVE_DUMB, ChainRule.BODY_DUMB):
            return [edge for seed in rule.seeds for edge in seed.shape.edges()]

        seed = rule.seeds[0]
        if rule.rule in (ChainRule.CURVE_TANGENT, ChainRule.CURVE_CHAIN):
            pool = [curve.shape for curve in self.entities(EntityKind.CURVE)]
        else:
            pool = list(seed.owner.shape.edges()) if seed.owner is not None else []
        if not any(seed.shape.is_same(edge) for edge in pool):
            pool.append(seed.shape)

        gap = rule.gap_tolerance if rule.gap_tolerance is not None else tolerances.distance
        angle = None
        if rule.rule in (ChainRule.CURVE_TANGENT, ChainRule.EDGE_TANGENT):
            angle = rule.angle_tolerance if rule.angle_tolerance is not None else tolerances.angle
        return _chain(seed.shape, pool, gap, angle)

    # ─── Builders ────────────────────────────────────────────────────────

    def create_extrude_builder(self) -> ExtrudeBuilder:
        return ExtrudeBuilder(self)

    def create_boolean_builder(self) -> BooleanBuilder:
        return BooleanBuilder(self)

    def create_extract_builder(self) -> ExtractBuilder:
        return ExtractBuilder(self)

    def create_trim_builder(self) -> TrimBuilder:
        return TrimBuilder(self)

    def create_offset_builder(self) -> OffsetBuilder:
        return OffsetBuilder(self)

    def create_project_builder(self) -> ProjectBuilder:
        return ProjectBuilder(self)

    # ─── Measurement ─────────────────────────────────────────────────────

    def body_volume(self, body: Entity, accuracy: float = 0.01) -> float:
        return body.shape.volume

    def curve_length(self, curve: Entity) -> float:
        return curve.shape.length

    def curve_ends(self, curve: Entity) -> Tuple[Point3d, Point3d]:
        start, end = _ends(curve.shape)
        return Point3d(start.X, start.Y, start.Z), Point3d(end.X, end.Y, end.Z)

    def evaluate_curve(self, curve: Entity, fraction: float) -> Point3d:
        p = curve.shape.position_at(fraction)
        return Point3d(p.X, p.Y, p.Z)

    def minimum_distance(self, first: Entity, second: Entity) -> float:
        return first.shape.distance_to(second.shape)

    def set_color(self, entity: Entity, color: int) -> None:
        entity.color = color

    def write_listing(self, line: str) -> None:
        self.listing.append(line)

    # ─── STEP exchange ───────────────────────────────────────────────────

    @classmethod
    def from_step(cls, filepath: Union[str, Path], prefix: str = "BODY") -> "Build123dDocument":
        """Load every solid of a STEP file as a body named ``PREFIX(n)``."""
        document = cls()
        document.load_step(filepath, prefix)
        return document

    def load_step(self, filepath: Union[str, Path], prefix: str = "BODY") -> List[Entity]:
        shape = import_step(str(filepath))
        bodies = [self.add_body(self.next_name(prefix), solid) for solid in shape.solids()]
        if not bodies:
            # Wire-frame files: keep the edges as curves
            for edge in shape.edges():
                self.add_curve(self.next_name("CURVE"), edge)
        logger.info(f"Loaded {len(bodies)} bodies from {filepath}")
        return bodies

    def export_step(self, filepath: Union[str, Path], names: Optional[List[str]] = None) -> None:
        """Write the named bodies (all bodies if names is None) to a STEP file."""
        if names is None:
            bodies = self.entities(EntityKind.BODY)
        else:
            bodies = [self._entities[name] for name in names]
        if not bodies:
            raise ValueError("No bodies to export")
        export_step(Compound([body.shape for body in bodies]), str(filepath))
        logger.info(f"Exported {len(bodies)} bodies to {filepath}")


def _chain(seed: Edge, pool: List[Edge], gap: float, angle: Optional[float]) -> List[Edge]:
    """Edges reachable from ``seed`` through shared endpoints.

    With ``angle`` set, a joint is only crossed when both edges are tangent
    there within ``angle`` degrees.
    """
    chain = [seed]
    frontier = [seed]
    remaining = [edge for edge in pool if not edge.is_same(seed)]
    while frontier:
        current = frontier.pop()
        current_ends = _ends(current)
        for candidate in list(remaining):
            candidate_ends = _ends(candidate)
            joined = False
            for i, j in itertools.product((0, 1), repeat=2):
                if (current_ends[i] - candidate_ends[j]).length > gap:
                    continue
                if angle is None or _tangent_at_joint(current, i, candidate, j, angle):
                    joined = True
                    break
            if joined:
                remaining.remove(candidate)
                chain.append(candidate)
                frontier.append(candidate)
    return chain
