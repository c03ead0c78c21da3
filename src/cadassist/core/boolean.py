"""Boolean subtraction of tool bodies from a target body."""

import logging
from typing import Any, Optional, Sequence

from ..errors import InvalidInputError
from .listing import log_info
from .scopes import BuilderScope, host_errors
from .selection import require

logger = logging.getLogger(__name__)


def subtract(document: Any, target: Any, tools: Sequence[Any]) -> Any:
    """
    Subtract several tool bodies from a target body.

    None entries in ``tools`` are skipped.

    Returns:
        The committed boolean feature

    Raises:
        InvalidInputError: If target is None or tools is None/empty
        HostOperationError: If the host rejects the subtraction
    """
    operation = "subtract"
    require(target, "target", operation)
    if tools is None or len(tools) == 0:
        raise InvalidInputError("Tools cannot be None or empty.", operation=operation)

    with host_errors(operation), BuilderScope(document.create_boolean_builder) as scope:
        builder = scope.builder
        builder.target = target
        for tool in tools:
            if tool is not None:
                builder.tools.append(tool)
        feature = builder.commit()

    log_info(logger, "subtract successful.")
    return feature


def subtract_single(document: Any, target: Any, tool: Any, copy_tools: bool = False) -> Any:
    """
    Subtract one tool body from a target body.

    Args:
        copy_tools: Keep the tool body after the subtraction

    Returns:
        The committed boolean feature

    Raises:
        InvalidInputError: If target or tool is None
        HostOperationError: If the host rejects the subtraction
    """
    operation = "subtract_single"
    require(target, "target", operation)
    require(tool, "tool", operation)

    with host_errors(operation), BuilderScope(document.create_boolean_builder) as scope:
        builder = scope.builder
        builder.target = target
        builder.tools.append(tool)
        builder.copy_tools = copy_tools
        feature = builder.commit()

    log_info(logger, "subtract_single successful.")
    return feature
