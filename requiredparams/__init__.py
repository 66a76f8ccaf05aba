"""
requiredparams - Correct OpenAPI parameter ``required`` flags from handler annotations.

FastAPI decides whether a parameter is required from its default value.
requiredparams lets a handler state it explicitly with a ``Required`` marker
and rewrites the generated OpenAPI operation accordingly, matching each
documented parameter to its handler parameter by name (honouring aliases on
``Query``, ``Form``, ``Path`` and ``Header``).

Main Exports:
    - Required: Marker placed in ``Annotated`` parameter metadata
    - RequiredParameterResolver: Resolver for one operation
    - resolve_required_parameters: Functional form of the resolver
    - ResolverConfig: Merge mode, binding kinds, missing/duplicate policies
    - configure_required_parameters: Install the filter into a FastAPI app
    - RequiredAttributeOperationFilter: The OpenAPI operation filter

Example:
    >>> from typing import Annotated
    >>> from fastapi import FastAPI, Query
    >>> from requiredparams import Required, configure_required_parameters
    >>>
    >>> app = FastAPI()
    >>>
    >>> @app.get("/users")
    ... async def list_users(uid: Annotated[str, Query(alias="uid"), Required()] = ""):
    ...     return []
    >>>
    >>> configure_required_parameters(app)
"""

from .annotations import Required
from .config import (
    DuplicateNameBehavior,
    MergeMode,
    MissingNameBehavior,
    ResolverConfig,
)
from .exceptions import (
    AmbiguousCanonicalNameError,
    RequiredParamsError,
    UnresolvedParameterNameError,
)
from .introspection import reflect_handler_parameters, reflect_route_parameters
from .models import (
    AnnotationKind,
    DocumentedParameter,
    HandlerParameter,
    ParameterAnnotation,
)
from .openapi import (
    OperationContext,
    RequiredAttributeOperationFilter,
    apply_operation_filters,
    configure_required_parameters,
)
from .resolver import RequiredParameterResolver, resolve_required_parameters

__version__ = "0.1.0"

__all__ = [
    "Required",
    "MergeMode",
    "MissingNameBehavior",
    "DuplicateNameBehavior",
    "ResolverConfig",
    "RequiredParamsError",
    "UnresolvedParameterNameError",
    "AmbiguousCanonicalNameError",
    "reflect_handler_parameters",
    "reflect_route_parameters",
    "AnnotationKind",
    "DocumentedParameter",
    "HandlerParameter",
    "ParameterAnnotation",
    "OperationContext",
    "RequiredAttributeOperationFilter",
    "apply_operation_filters",
    "configure_required_parameters",
    "RequiredParameterResolver",
    "resolve_required_parameters",
]
