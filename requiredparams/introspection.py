"""Reflect FastAPI handlers into HandlerParameter descriptors.

Annotations are collected in declaration order: ``Annotated`` metadata as
written, followed by the parameter default when it is a FastAPI parameter
object (``page: int = Query(alias="p")``).
"""

import inspect
import logging
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Set,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from fastapi import params
from fastapi.routing import APIRoute
from pydantic import BaseModel

from .annotations import is_required_marker
from .models import AnnotationKind, HandlerParameter, ParameterAnnotation

logger = logging.getLogger(__name__)

# Subclasses first: File < Form < Body
_PARAM_KINDS = (
    (params.Form, AnnotationKind.FROM_FORM),
    (params.Body, AnnotationKind.FROM_BODY),
    (params.Query, AnnotationKind.FROM_QUERY),
    (params.Path, AnnotationKind.FROM_ROUTE),
    (params.Header, AnnotationKind.FROM_HEADER),
    (params.Cookie, AnnotationKind.FROM_COOKIE),
)

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)

# Bindings under which FastAPI spreads a pydantic model into one parameter per field
_MODEL_PARAM_TYPES = (params.Query, params.Header, params.Cookie)


def _hint_target(func: Callable[..., Any]) -> Any:
    """Return the object whose annotations describe ``func``'s parameters."""
    if inspect.isclass(func):
        return func.__init__
    if not (inspect.isfunction(func) or inspect.ismethod(func)) and hasattr(
        func, "__call__"
    ):
        return func.__call__
    return func


def _type_hints(func: Callable[..., Any]) -> Dict[str, Any]:
    try:
        return get_type_hints(_hint_target(func), include_extras=True)
    except (NameError, TypeError, AttributeError) as e:
        # Unresolvable forward references; fall back to raw annotations
        logger.warning(
            f"Could not evaluate type hints of {func!r}, Required markers in "
            f"string annotations will be missed: {e}"
        )
        return {}


def _annotated_metadata(hint: Any) -> tuple:
    """Extract ``Annotated`` metadata, looking through ``Optional[...]``."""
    if get_origin(hint) is Annotated:
        return get_args(hint)[1:]
    if get_origin(hint) is Union:
        for arg in get_args(hint):
            if get_origin(arg) is Annotated:
                return get_args(arg)[1:]
    return ()


def to_parameter_annotation(
    value: Any, declared_name: str
) -> Optional[ParameterAnnotation]:
    """Translate one piece of parameter metadata into a ParameterAnnotation.

    Args:
        value: ``Annotated`` metadata item or parameter default
        declared_name: Name of the parameter the metadata belongs to

    Returns:
        The annotation, or None when ``value`` is neither the Required marker
        nor a FastAPI request parameter
    """
    if is_required_marker(value):
        return ParameterAnnotation(kind=AnnotationKind.REQUIRED)

    for param_cls, kind in _PARAM_KINDS:
        if isinstance(value, param_cls):
            override_name = value.alias
            if (
                override_name is None
                and isinstance(value, params.Header)
                and value.convert_underscores
                and "_" in declared_name
            ):
                # FastAPI documents header parameters under the hyphenated name
                override_name = declared_name.replace("_", "-")
            return ParameterAnnotation(kind=kind, override_name=override_name)

    return None


def _is_dependency(parameter: inspect.Parameter, metadata: tuple) -> bool:
    if isinstance(parameter.default, params.Depends):
        return True
    return any(isinstance(item, params.Depends) for item in metadata)


def _base_type(hint: Any) -> Any:
    if get_origin(hint) is Annotated:
        return get_args(hint)[0]
    return hint


def _model_binding(
    hint: Any, metadata: tuple, default: Any
) -> Optional[params.Param]:
    """Return the Query/Header/Cookie binding of a parameter whose type is a
    pydantic model, or None for ordinary parameters."""
    model = _base_type(hint)
    if not (inspect.isclass(model) and issubclass(model, BaseModel)):
        return None
    for item in (*metadata, default):
        if isinstance(item, _MODEL_PARAM_TYPES):
            return item
    return None


def reflect_model_fields(
    model: Type[BaseModel], binding: params.Param
) -> List[HandlerParameter]:
    """Reflect the fields of a pydantic model bound to query, header or
    cookie parameters.

    FastAPI documents each field of such a model as a separate parameter,
    named after the field's alias. Header fields without an alias are
    hyphenated unless the binding disables ``convert_underscores``.

    Args:
        model: Pydantic model class used as the parameter type
        binding: The ``Query``, ``Header`` or ``Cookie`` object of the parameter

    Returns:
        One handler parameter per model field, in field order
    """
    kind = to_parameter_annotation(binding, "").kind
    convert_underscores = isinstance(binding, params.Header) and getattr(
        binding, "convert_underscores", True
    )
    reflected: List[HandlerParameter] = []

    for field_name, field_info in model.model_fields.items():
        validation_alias = field_info.validation_alias
        override_name = (
            validation_alias if isinstance(validation_alias, str) else None
        ) or field_info.alias
        if override_name is None and convert_underscores and "_" in field_name:
            override_name = field_name.replace("_", "-")

        annotations = [ParameterAnnotation(kind=kind, override_name=override_name)]
        annotations.extend(
            to_parameter_annotation(item, field_name)
            or ParameterAnnotation(kind=AnnotationKind.OTHER)
            for item in field_info.metadata
        )
        reflected.append(
            HandlerParameter(declared_name=field_name, annotations=tuple(annotations))
        )

    return reflected


def reflect_handler_parameters(func: Callable[..., Any]) -> List[HandlerParameter]:
    """Reflect the parameters of a handler or dependency callable.

    Parameters injected through ``Depends``/``Security`` and variadic
    parameters are skipped.

    Args:
        func: Endpoint function, dependency function or dependency class

    Returns:
        Handler parameters in signature order
    """
    try:
        signature = inspect.signature(func)
    except (ValueError, TypeError) as e:
        logger.debug(f"Cannot inspect signature of {func!r}: {e}")
        return []

    hints = _type_hints(func)
    reflected: List[HandlerParameter] = []

    for name, parameter in signature.parameters.items():
        if parameter.kind in _SKIPPED_KINDS:
            continue

        hint = hints.get(name, parameter.annotation)
        metadata = _annotated_metadata(hint)
        if _is_dependency(parameter, metadata):
            continue

        binding = _model_binding(hint, metadata, parameter.default)
        if binding is not None:
            reflected.extend(reflect_model_fields(_base_type(hint), binding))
            continue

        annotations = [
            to_parameter_annotation(item, name)
            or ParameterAnnotation(kind=AnnotationKind.OTHER)
            for item in metadata
        ]
        # A plain default value is not an annotation
        default_annotation = to_parameter_annotation(parameter.default, name)
        if default_annotation is not None:
            annotations.append(default_annotation)

        reflected.append(
            HandlerParameter(declared_name=name, annotations=tuple(annotations))
        )

    return reflected


def reflect_route_parameters(route: APIRoute) -> List[HandlerParameter]:
    """Reflect the endpoint of a route together with its dependency tree.

    FastAPI documents parameters declared on dependencies as parameters of
    the operation, so they are reflected too. The endpoint's own parameters
    come first; each dependency callable is reflected once.

    Args:
        route: FastAPI route

    Returns:
        Handler parameters of the endpoint followed by those of its dependencies
    """
    reflected: List[HandlerParameter] = []
    visited: Set[int] = set()

    def visit(dependant: Any) -> None:
        call = dependant.call
        if call is not None and id(call) not in visited:
            visited.add(id(call))
            reflected.extend(reflect_handler_parameters(call))
        for sub_dependant in dependant.dependencies:
            visit(sub_dependant)

    visit(route.dependant)
    return reflected


__all__ = [
    "to_parameter_annotation",
    "reflect_handler_parameters",
    "reflect_model_fields",
    "reflect_route_parameters",
]
