"""
Cadassist - helper operations over a host CAD session.

Extrusion, subtraction, extraction, offset curves, volume-based trimming,
projection and measurement, each wrapped so that host builders and undo
checkpoints are always released.

Example:
    >>> from cadassist import Build123dDocument, trim_body_small_cut
    >>>
    >>> doc = Build123dDocument.from_step("assembly.step")
    >>> result = trim_body_small_cut(doc, "BODY(1)", "BODY(2)", reverse=False)
    >>> result.value.removed_percent
    12.5

Note: All imports are lazy-loaded. The core operations and settings can be
imported without build123d; only the Build123dDocument host needs it.
"""

__version__ = "0.1.0"

_ENUMS = {"EntityKind", "ChainRule", "TrimPolicy", "OffsetSense", "ErrorKind"}

_ERRORS = {
    "CadAssistError",
    "InvalidInputError",
    "HostOperationError",
    "DirectionUnresolvedError",
    "OperationResult",
}

_IO = {
    "OperationSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
    "save_settings",
}

_HOST = {
    "HostDocument",
    "Point3d",
    "SelectionRule",
    "SectionTolerances",
    "Build123dDocument",
}

_CORE = {
    "extrude_curves",
    "extrude_tangent_curves_and_edges",
    "extrude_connected_curves_and_edges",
    "extrude_sketch",
    "subtract",
    "subtract_single",
    "extract_bodies_as_single_body",
    "extract_bodies",
    "extract_body",
    "trim_body_by_volume",
    "trim_body_small_cut",
    "trim_body_large_cut",
    "TrimOutcome",
    "create_offset_curves",
    "create_dual_offset_curves",
    "project_curves_and_edges",
    "measure_body_volume",
    "curve_length",
    "total_curve_length",
    "offset_curve_length",
    "ask_curve_ends",
    "minimum_distance",
    "lowest_point_on_curve",
    "unique_curve_endpoints",
    "EndpointCounter",
    "set_curve_color",
    "attach_listing",
    "detach_listing",
}

_SUBMODULES = (
    ("enums", _ENUMS),
    ("errors", _ERRORS),
    ("io", _IO),
    ("host", _HOST),
    ("core", _CORE),
)

# Cache for lazy-loaded modules
_modules = {}


def __getattr__(name):
    """Lazy load submodules when their attributes are accessed."""
    for module_name, names in _SUBMODULES:
        if name in names:
            if module_name not in _modules:
                import importlib
                _modules[module_name] = importlib.import_module(f".{module_name}", __name__)
            return getattr(_modules[module_name], name)

    raise AttributeError(f"module 'cadassist' has no attribute {name!r}")


__all__ = ["__version__"] + sorted(_ENUMS | _ERRORS | _IO | _HOST | _CORE)
