"""
Body extraction: associative copies of existing bodies.

Missing inputs raise InvalidInputError. Host failures are reported
through each variant's empty sentinel: None for the merged extract, an empty list for
:func:`extract_bodies`, and the original body for :func:`extract_body`.
"""

import logging
from typing import Any, Optional, Sequence

from ..enums import EntityKind, ErrorKind
from ..errors import OperationResult
from ..host.protocol import kind_of
from .listing import log_error, log_info
from .scopes import BuilderScope
from .selection import body_rule, require, require_items

logger = logging.getLogger(__name__)


def _extract(document: Any, bodies: Sequence[Any]) -> Optional[Any]:
    """Commit one extract-body builder; returns the extracted body or None."""
    with BuilderScope(document.create_extract_builder) as scope:
        builder = scope.builder
        builder.inherit_material = True
        builder.associative = True
        builder.hide_original = False
        builder.replace_rules([body_rule(bodies)])
        extracted = builder.commit()

    if kind_of(extracted) == EntityKind.BODY:
        return extracted
    # Some hosts return a feature wrapping the body
    if kind_of(extracted) == EntityKind.FEATURE:
        bodies = [e for e in extracted.get_entities() if kind_of(e) == EntityKind.BODY]
        if bodies:
            return bodies[0]
    return None


def extract_bodies_as_single_body(document: Any, bodies: Sequence[Any]) -> OperationResult:
    """Extract several bodies into one body.

    Returns:
        OperationResult whose value is the extracted body, or None
    """
    operation = "extract_bodies_as_single_body"
    bodies = require_items(bodies, "bodies", operation)

    try:
        extracted = _extract(document, bodies)
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e), attempts=1)

    if extracted is None:
        log_info(logger, f"{operation}: Failed to extract a single body.")
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED,
                                       "Failed to extract a single body", attempts=1)

    log_info(logger, f"{operation} successful: {getattr(extracted, 'name', '')}")
    return OperationResult(operation, value=extracted)


def extract_bodies(document: Any, body: Any) -> OperationResult:
    """Extract one body.

    Returns:
        OperationResult whose value is a list holding the extracted copy,
        or an empty list
    """
    operation = "extract_bodies"
    require(body, "body", operation)

    try:
        extracted = _extract(document, [body])
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       value=[], attempts=1)

    if extracted is None:
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED,
                                       "Extraction produced no body", value=[], attempts=1)

    log_info(logger, f"{operation} successful: {getattr(extracted, 'name', '')}")
    return OperationResult(operation, value=[extracted])


def extract_body(document: Any, body: Any) -> OperationResult:
    """Extract one body, falling back to the original body on failure.

    Returns:
        OperationResult whose value is the extracted copy; on host failure
        the value is ``body`` itself and error_kind is HOST_REJECTED
    """
    operation = "extract_body"
    require(body, "body", operation)

    try:
        extracted = _extract(document, [body])
    except Exception as e:
        log_error(logger, operation, e)
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED, str(e),
                                       value=body, attempts=1)

    if extracted is None:
        log_info(logger, f"{operation}: Failed to extract, returning original body.")
        return OperationResult.failure(operation, ErrorKind.HOST_REJECTED,
                                       "Failed to extract, returning original body",
                                       value=body, attempts=1)

    log_info(logger, f"{operation} successful: {getattr(extracted, 'name', '')}")
    return OperationResult(operation, value=extracted)
