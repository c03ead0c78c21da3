"""
Scoped acquisition of host builders and undo checkpoints.

Every builder obtained from the host is destroyed exactly once and every
checkpoint is released exactly once, whatever way the enclosing block exits.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from ..errors import CadAssistError, HostOperationError
from .listing import log_error

logger = logging.getLogger(__name__)

B = TypeVar("B")


class BuilderScope(Generic[B]):
    """Owns one host builder at a time.

    Example:
        >>> with BuilderScope(document.create_offset_builder) as scope:
        ...     scope.builder.distance = 10.0
        ...     feature = scope.builder.commit()
        ...     builder = scope.renew()   # destroy and start over
    """

    def __init__(self, factory: Callable[[], B]):
        self._factory = factory
        self.builder: Optional[B] = None

    def __enter__(self) -> "BuilderScope[B]":
        self.builder = self._factory()
        return self

    def renew(self) -> B:
        """Destroy the current builder and create a fresh one."""
        self._destroy()
        self.builder = self._factory()
        return self.builder

    def _destroy(self) -> None:
        builder, self.builder = self.builder, None
        if builder is None:
            return
        try:
            builder.destroy()
        except Exception as e:
            logger.warning(f"Builder cleanup failed: {e}")

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._destroy()
        return False


class Checkpoint:
    """An undo checkpoint held for the duration of a ``with`` block.

    Args:
        document: Host document
        name: Checkpoint name shown in the host's undo list
        visible: Whether the checkpoint appears in the undo list
        rollback_on_error: Roll back to the checkpoint when the block raises
    """

    def __init__(self, document: Any, name: str, visible: bool = True,
                 rollback_on_error: bool = False):
        self.document = document
        self.name = name
        self.visible = visible
        self.rollback_on_error = rollback_on_error
        self.mark: Any = None

    def __enter__(self) -> "Checkpoint":
        self.mark = self.document.set_checkpoint(self.name, self.visible)
        return self

    def rename(self, name: str) -> None:
        self.name = name
        self.document.rename_checkpoint(self.mark, name)

    def rollback(self) -> None:
        """Undo everything committed since the checkpoint was set."""
        self.document.rollback_to(self.mark)

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None and self.rollback_on_error:
                try:
                    self.rollback()
                except Exception as e:
                    logger.warning(f"Rollback to '{self.name}' failed: {e}")
        finally:
            try:
                self.document.release_checkpoint(self.mark)
            except Exception as e:
                logger.warning(f"Releasing checkpoint '{self.name}' failed: {e}")
        return False


@contextmanager
def host_errors(operation: str) -> Iterator[None]:
    """Log failures of a single-shot operation and re-raise them typed.

    cadassist errors pass through unchanged; anything else raised by the
    host is wrapped in HostOperationError.
    """
    try:
        yield
    except CadAssistError as e:
        log_error(logger, operation, e)
        raise
    except Exception as e:
        log_error(logger, operation, e)
        raise HostOperationError(str(e), operation=operation) from e
