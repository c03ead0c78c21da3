"""Display attributes of document entities."""

import logging
from typing import Any, Optional, Sequence

from .scopes import host_errors

logger = logging.getLogger(__name__)


def set_curve_color(document: Any, curves: Optional[Sequence[Any]], color: int) -> int:
    """
    Set the display color of every curve in a collection.

    None or empty collections are a no-op and None entries are skipped.

    Returns:
        Number of curves recolored

    Raises:
        HostOperationError: If the host rejects the color change
    """
    if not curves:
        return 0

    changed = 0
    with host_errors("set_curve_color"):
        for curve in curves:
            if curve is not None:
                document.set_color(curve, color)
                changed += 1
    logger.debug(f"set_curve_color: {changed} curves set to color {color}")
    return changed
