"""Data models exchanged between the introspection layer, the resolver and
the OpenAPI operation filter.

Handler-side models are frozen: they are reflected once per operation and
never change during resolution. DocumentedParameter is the only mutable
model; its ``required`` flag is what the resolver corrects.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AnnotationKind(str, Enum):
    """Kinds of metadata a handler parameter can carry."""

    REQUIRED = "required"
    FROM_QUERY = "from_query"
    FROM_FORM = "from_form"
    FROM_ROUTE = "from_route"
    FROM_HEADER = "from_header"
    FROM_COOKIE = "from_cookie"
    FROM_BODY = "from_body"
    OTHER = "other"

    @property
    def is_name_binding(self) -> bool:
        """Whether this kind binds the parameter to a request source."""
        return self not in (AnnotationKind.REQUIRED, AnnotationKind.OTHER)


class ParameterAnnotation(BaseModel):
    """One piece of metadata attached to a handler parameter.

    Attributes:
        kind: What the annotation declares
        override_name: Explicit request-side name for binding annotations
    """

    model_config = ConfigDict(frozen=True)

    kind: AnnotationKind
    override_name: Optional[str] = None


class HandlerParameter(BaseModel):
    """A formal parameter of the function implementing an operation.

    Attributes:
        declared_name: Source-level parameter identifier
        annotations: Metadata in declaration order
    """

    model_config = ConfigDict(frozen=True)

    declared_name: str
    annotations: Tuple[ParameterAnnotation, ...] = Field(default_factory=tuple)

    @property
    def is_required(self) -> bool:
        """True when a Required annotation is present; its arguments are ignored."""
        return any(a.kind is AnnotationKind.REQUIRED for a in self.annotations)


class DocumentedParameter(BaseModel):
    """An entry of an operation's documented parameter list.

    Attributes:
        name: Parameter name as it appears in the OpenAPI document
        required: Required flag, corrected in place by the resolver
        location: OpenAPI ``in`` value (query, path, header, cookie)
    """

    name: str
    required: bool = False
    location: Optional[str] = None

    @classmethod
    def from_openapi(cls, parameter: Dict[str, Any]) -> "DocumentedParameter":
        """Build a documented parameter from an OpenAPI parameter object.

        Args:
            parameter: Parameter object from an operation's ``parameters`` list

        Returns:
            DocumentedParameter mirroring the object's name and flags
        """
        return cls(
            name=parameter["name"],
            required=bool(parameter.get("required", False)),
            location=parameter.get("in"),
        )

    def apply_to(self, parameter: Dict[str, Any]) -> None:
        """Write the required flag back into an OpenAPI parameter object."""
        parameter["required"] = self.required


__all__ = [
    "AnnotationKind",
    "ParameterAnnotation",
    "HandlerParameter",
    "DocumentedParameter",
]
