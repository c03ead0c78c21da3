"""Type-safe enums shared by the host contract and the operations."""

from enum import Enum


class EntityKind(Enum):
    """Kind of a host handle"""
    CURVE = "curve"
    EDGE = "edge"
    BODY = "body"
    SKETCH = "sketch"
    PLANE = "plane"
    FEATURE = "feature"


class ChainRule(Enum):
    """How the host gathers a section from a seed curve or edge"""
    CURVE_TANGENT = "curve_tangent"    # Follow tangent-continuous curves
    EDGE_TANGENT = "edge_tangent"      # Follow tangent-continuous body edges
    CURVE_CHAIN = "curve_chain"        # Follow connected curves
    EDGE_CHAIN = "edge_chain"          # Follow connected body edges
    CURVE_DUMB = "curve_dumb"          # Exactly the given curves
    BODY_DUMB = "body_dumb"            # Exactly the given bodies
    FACE_BODY = "face_body"            # All faces of a body
    FACE_DATUM = "face_datum"          # A datum plane used as a face


class TrimPolicy(Enum):
    """Which side of a volume trim the caller expects to keep.

    SMALL_CUT keeps trims that remove less than half the body,
    LARGE_CUT keeps trims that remove half or more.
    """
    SMALL_CUT = "small"
    LARGE_CUT = "large"


class OffsetSense(Enum):
    """Expected change of total length produced by an offset"""
    LENGTHEN = "lengthen"  # Offset must not be shorter than the original
    SHORTEN = "shorten"    # Offset must not be longer than the original


class ErrorKind(Enum):
    """Failure category reported by an operation"""
    NONE = "none"
    INVALID_INPUT = "invalid_input"
    HOST_REJECTED = "host_rejected"
    DIRECTION_UNRESOLVED = "direction_unresolved"
