"""Declarative markers attached to handler parameters.

Examples:
    from typing import Annotated

    from fastapi import Query

    from requiredparams import Required

    @app.get("/users")
    async def list_users(
        uid: Annotated[str, Query(alias="uid"), Required()],
        page: Annotated[int, Query()] = 1,
    ):
        ...
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Required:
    """Marks a handler parameter as required in the generated OpenAPI document.

    Only the presence of the marker matters. ``message`` is accepted for
    readability at the declaration site and has no effect on resolution.

    Attributes:
        message: Optional note describing why the parameter is required
    """

    message: Optional[str] = None


def is_required_marker(value: Any) -> bool:
    """Check whether a metadata object is the Required marker.

    Both the bare class (``Annotated[str, Required]``) and an instance
    (``Annotated[str, Required()]``) are accepted.

    Args:
        value: Metadata object taken from a parameter declaration

    Returns:
        True if the value marks the parameter as required
    """
    return value is Required or isinstance(value, Required)


__all__ = ["Required", "is_required_marker"]
