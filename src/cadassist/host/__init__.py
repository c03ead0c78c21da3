"""
Cadassist Host - the host document contract and a build123d implementation.
"""

from .protocol import (
    HostDocument,
    FeatureHandle,
    Point3d,
    SectionTolerances,
    SelectionRule,
    kind_of,
)

# The build123d host needs OpenCascade - make import conditional
# so the contract stays importable where build123d is not installed
try:
    from .build123d_document import Build123dDocument, Entity, Feature

    __all__ = [
        "HostDocument",
        "FeatureHandle",
        "Point3d",
        "SectionTolerances",
        "SelectionRule",
        "kind_of",
        "Build123dDocument",
        "Entity",
        "Feature",
    ]
except ImportError:
    __all__ = [
        "HostDocument",
        "FeatureHandle",
        "Point3d",
        "SectionTolerances",
        "SelectionRule",
        "kind_of",
    ]
