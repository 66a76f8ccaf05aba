"""Required-ness resolution for one API operation.

The resolver correlates documented parameters with handler parameters by
canonical name and rewrites each documented ``required`` flag from the
presence of a Required annotation on the handler side. It performs no
reflection: handler parameters arrive as plain data from
:mod:`requiredparams.introspection` or any other source.
"""

import logging
from typing import Dict, List, MutableSequence, Optional, Sequence, Union

from .config import (
    DuplicateNameBehavior,
    MergeMode,
    MissingNameBehavior,
    ResolverConfig,
)
from .exceptions import AmbiguousCanonicalNameError, UnresolvedParameterNameError
from .models import DocumentedParameter, HandlerParameter

logger = logging.getLogger(__name__)


class RequiredParameterResolver:
    """Correct documented required flags from handler annotations."""

    def __init__(self, config: Optional[ResolverConfig] = None):
        """Initialize the resolver.

        Args:
            config: Resolver configuration, defaults to ``ResolverConfig()``
        """
        self.config = config or ResolverConfig()

    def canonical_name(self, parameter: HandlerParameter) -> str:
        """Return the name that correlates a handler parameter with its
        documented counterpart.

        The first recognized binding annotation decides: its override name
        if it has one, else the declared name. Later binding annotations are
        ignored.

        Args:
            parameter: Handler parameter to name

        Returns:
            Canonical parameter name
        """
        recognized = self.config.recognized_name_binding_kinds
        for annotation in parameter.annotations:
            if annotation.kind in recognized:
                return annotation.override_name or parameter.declared_name
        return parameter.declared_name

    def build_required_map(
        self, handler_parameters: Sequence[HandlerParameter]
    ) -> Dict[str, bool]:
        """Map each canonical name to whether its handler parameter is required.

        Args:
            handler_parameters: Reflected handler parameters in signature order

        Returns:
            Dictionary of canonical name to required flag

        Raises:
            AmbiguousCanonicalNameError: If two parameters share a canonical
                name and duplicates are configured to fail
        """
        required_by_name: Dict[str, bool] = {}
        claimed_by: Dict[str, List[str]] = {}

        for parameter in handler_parameters:
            name = self.canonical_name(parameter)
            if name not in required_by_name:
                required_by_name[name] = parameter.is_required
                claimed_by[name] = [parameter.declared_name]
                continue

            claimed_by[name].append(parameter.declared_name)
            if self.config.duplicate_name_behavior is DuplicateNameBehavior.FAIL:
                raise AmbiguousCanonicalNameError(name, claimed_by[name])
            if required_by_name[name] != parameter.is_required:
                logger.warning(
                    f"Handler parameters {claimed_by[name]} share canonical name "
                    f"'{name}' but disagree on required; keeping "
                    f"{required_by_name[name]} from '{claimed_by[name][0]}'"
                )

        return required_by_name

    def resolve(
        self,
        documented_parameters: MutableSequence[DocumentedParameter],
        handler_parameters: Sequence[HandlerParameter],
    ) -> None:
        """Rewrite the required flag of each documented parameter in place.

        Args:
            documented_parameters: Draft parameter list of the operation
            handler_parameters: Reflected parameters of the operation handler

        Raises:
            UnresolvedParameterNameError: If a documented name has no handler
                counterpart and missing names are configured to fail
            AmbiguousCanonicalNameError: See :meth:`build_required_map`
        """
        if not documented_parameters:
            return

        required_by_name = self.build_required_map(handler_parameters)
        merge_mode = self.config.merge_mode

        for parameter in documented_parameters:
            if parameter.name not in required_by_name:
                if (
                    self.config.missing_name_behavior
                    is MissingNameBehavior.SKIP_UNCHANGED
                ):
                    logger.debug(
                        f"Leaving '{parameter.name}' unchanged: no matching "
                        "handler parameter"
                    )
                    continue
                raise UnresolvedParameterNameError(
                    parameter.name, required_by_name.keys()
                )

            derived = required_by_name[parameter.name]
            if merge_mode is MergeMode.OR_MERGE:
                parameter.required = parameter.required or derived
            else:
                parameter.required = derived


def resolve_required_parameters(
    documented_parameters: MutableSequence[DocumentedParameter],
    handler_parameters: Sequence[HandlerParameter],
    merge_mode: Union[MergeMode, str],
    config: Optional[ResolverConfig] = None,
) -> None:
    """Functional form of :meth:`RequiredParameterResolver.resolve`.

    Args:
        documented_parameters: Draft parameter list, mutated in place
        handler_parameters: Reflected handler parameters
        merge_mode: Merge mode, overriding the one in ``config``
        config: Remaining configuration, defaults to ``ResolverConfig()``
    """
    # Rebuild rather than model_copy so string merge modes are validated
    config = ResolverConfig(
        **{**(config or ResolverConfig()).model_dump(), "merge_mode": merge_mode}
    )
    RequiredParameterResolver(config).resolve(documented_parameters, handler_parameters)


__all__ = ["RequiredParameterResolver", "resolve_required_parameters"]
