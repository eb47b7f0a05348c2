"""Tagged operation results and the tool-facing envelope.

Operations return ``Ok(value)`` or ``Err(kind, message)``. The MCP tools turn
either into the uniform envelope::

    {"success": bool, "error": kind?, "message": text?, "data": payload?}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from pydantic import BaseModel
import structlog

from .errors import ErrorKind, TuskyError

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    message: str | None = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: str
    message: str

    @property
    def success(self) -> bool:
        return False


Result = Union[Ok[T], Err]


async def capture(operation: Awaitable[T], message: str | None = None) -> "Result[T]":
    """Await an operation and convert its outcome into a result.

    This is the operation boundary: no exception escapes it. Known errors keep
    their kind; anything else is reported as an operational error with the
    original message preserved.
    """
    try:
        return Ok(await operation, message=message)
    except TuskyError as e:
        return Err(kind=e.kind, message=e.message)
    except Exception as e:
        logger.error("operation_failed", error=str(e), error_type=type(e).__name__)
        return Err(kind=ErrorKind.OPERATIONAL.value, message=str(e) or type(e).__name__)


def jsonable(value: Any) -> Any:
    """Convert models (and containers of models) into JSON-ready data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    return value


def to_envelope(
    result: "Result[Any]",
    present: Callable[[Any], Any] | None = None,
) -> dict[str, Any]:
    """Render a result as the tool-facing envelope.

    Args:
        result: The operation result
        present: Optional function shaping the success payload

    Returns:
        Envelope dict
    """
    if isinstance(result, Err):
        kind = result.kind.value if isinstance(result.kind, Enum) else result.kind
        return {"success": False, "error": kind, "message": result.message}

    envelope: dict[str, Any] = {"success": True}
    if result.message:
        envelope["message"] = result.message
    if result.value is not None:
        envelope["data"] = present(result.value) if present else jsonable(result.value)
    return envelope
