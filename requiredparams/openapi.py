"""OpenAPI integration for FastAPI applications.

This module provides the operation filter that corrects parameter ``required``
flags in a generated OpenAPI document, and the hook that installs it into a
FastAPI app's schema generation.

Examples:
    app = FastAPI()
    configure_required_parameters(app, ResolverConfig.extended())
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Protocol, Sequence

from fastapi.routing import APIRoute

from .config import ResolverConfig
from .exceptions import RequiredParamsError
from .introspection import reflect_route_parameters
from .models import DocumentedParameter, HandlerParameter
from .resolver import RequiredParameterResolver

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@dataclass
class OperationContext:
    """Read-only information about the operation being filtered.

    Attributes:
        path: Path template as it appears in the OpenAPI document
        method: HTTP method, upper case
        handler_parameters: Reflected parameters of the handler and its dependencies
        route: FastAPI route the operation was generated from
    """

    path: str
    method: str
    handler_parameters: List[HandlerParameter] = field(default_factory=list)
    route: Optional[APIRoute] = None


class OperationFilter(Protocol):
    """Post-processing hook applied to each generated operation."""

    def apply(self, operation: Dict[str, Any], context: OperationContext) -> None:
        """Mutate the operation object in place.

        Args:
            operation: OpenAPI operation object
            context: Information about the operation's handler
        """
        ...


class RequiredAttributeOperationFilter:
    """Marks parameters annotated with ``Required`` as required in the
    generated OpenAPI document."""

    def __init__(self, config: Optional[ResolverConfig] = None):
        self.resolver = RequiredParameterResolver(config)

    @property
    def config(self) -> ResolverConfig:
        return self.resolver.config

    def apply(self, operation: Dict[str, Any], context: OperationContext) -> None:
        """Correct the ``required`` flag of every parameter of the operation.

        Args:
            operation: OpenAPI operation object, mutated in place
            context: Information about the operation's handler

        Raises:
            RequiredParamsError: If the parameter list cannot be reconciled
                with the handler under the configured policies
        """
        parameters = operation.get("parameters")
        if not parameters:
            return

        documented = [DocumentedParameter.from_openapi(p) for p in parameters]
        try:
            self.resolver.resolve(documented, context.handler_parameters)
        except RequiredParamsError as e:
            logger.error(
                f"Cannot resolve required parameters of {context.method} "
                f"{context.path}: {e.message}",
                extra={
                    "path": context.path,
                    "method": context.method,
                    "details": e.details,
                },
            )
            raise

        for raw, parameter in zip(parameters, documented):
            parameter.apply_to(raw)

        flags = {p.name: p.required for p in documented}
        logger.debug(
            f"Resolved required flags for {context.method} {context.path}: {flags}"
        )


def apply_operation_filters(
    schema: Dict[str, Any],
    routes: Iterable[Any],
    filters: Sequence[OperationFilter],
) -> Dict[str, Any]:
    """Run operation filters over every operation generated from ``routes``.

    Routes that are not API routes, are excluded from the schema or have no
    generated operation are skipped.

    Args:
        schema: OpenAPI document, mutated in place
        routes: Application routes, typically ``app.routes``
        filters: Filters to apply to each operation, in order

    Returns:
        The same schema object
    """
    paths = schema.get("paths") or {}

    for route in routes:
        if not isinstance(route, APIRoute) or not route.include_in_schema:
            continue
        path_item = paths.get(route.path_format)
        if not path_item:
            continue

        handler_parameters: Optional[List[HandlerParameter]] = None
        for method in sorted(route.methods or ()):
            operation = path_item.get(method.lower())
            if operation is None:
                continue
            if handler_parameters is None:
                handler_parameters = reflect_route_parameters(route)

            context = OperationContext(
                path=route.path_format,
                method=method,
                handler_parameters=handler_parameters,
                route=route,
            )
            for operation_filter in filters:
                operation_filter.apply(operation, context)

    return schema


def configure_required_parameters(
    app: "FastAPI", config: Optional[ResolverConfig] = None
) -> None:
    """Install the required-parameter filter into a FastAPI app.

    The app's ``openapi`` method is wrapped so the filter runs once, when the
    schema is first generated; the corrected schema is what FastAPI caches
    and serves. Calling this again for the same app has no effect.

    Args:
        app: FastAPI application instance
        config: Resolver configuration, defaults to ``ResolverConfig()``
    """
    if getattr(app.state, "required_parameters_configured", False):
        return

    original_openapi = app.openapi
    operation_filter = RequiredAttributeOperationFilter(config)

    def openapi_with_required_parameters() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()
        try:
            apply_operation_filters(schema, app.routes, [operation_filter])
        except RequiredParamsError:
            # Don't serve the uncorrected draft on the next call
            app.openapi_schema = None
            raise
        return schema

    app.openapi = openapi_with_required_parameters  # type: ignore[method-assign]
    app.state.required_parameters_configured = True


__all__ = [
    "OperationContext",
    "OperationFilter",
    "RequiredAttributeOperationFilter",
    "apply_operation_filters",
    "configure_required_parameters",
]
