"""Configuration for the required-parameter resolver.

This module exposes the resolver's configuration points as a validated
pydantic model, together with the two preset variants and an environment
loader.
"""

import os
from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import AnnotationKind


class MergeMode(str, Enum):
    """How a derived required flag combines with the documented one."""

    OVERWRITE = "overwrite"
    OR_MERGE = "or_merge"


class MissingNameBehavior(str, Enum):
    """What to do when a documented parameter has no handler counterpart."""

    FAIL_FAST = "fail_fast"
    SKIP_UNCHANGED = "skip_unchanged"


class DuplicateNameBehavior(str, Enum):
    """What to do when handler parameters share a canonical name."""

    FIRST_WINS = "first_wins"
    FAIL = "fail"


QUERY_BINDING_KINDS: FrozenSet[AnnotationKind] = frozenset(
    {AnnotationKind.FROM_QUERY}
)

EXTENDED_BINDING_KINDS: FrozenSet[AnnotationKind] = frozenset(
    {
        AnnotationKind.FROM_QUERY,
        AnnotationKind.FROM_FORM,
        AnnotationKind.FROM_ROUTE,
        AnnotationKind.FROM_HEADER,
    }
)

ENV_PREFIX = "REQUIREDPARAMS_"


class ResolverConfig(BaseModel):
    """Configuration model for RequiredParameterResolver.

    Attributes:
        merge_mode: Overwrite the documented flag, or OR it with the derived one
        recognized_name_binding_kinds: Annotation kinds whose override name
            replaces the declared parameter name
        missing_name_behavior: Fail or skip when a documented name is unknown
        duplicate_name_behavior: Keep the first value or fail when several
            handler parameters resolve to the same canonical name
    """

    model_config = ConfigDict(frozen=True)

    merge_mode: MergeMode = MergeMode.OVERWRITE
    recognized_name_binding_kinds: FrozenSet[AnnotationKind] = Field(
        default=EXTENDED_BINDING_KINDS,
        description="Annotation kinds considered for name override",
    )
    missing_name_behavior: MissingNameBehavior = MissingNameBehavior.FAIL_FAST
    duplicate_name_behavior: DuplicateNameBehavior = DuplicateNameBehavior.FIRST_WINS

    @field_validator("recognized_name_binding_kinds")
    @classmethod
    def _only_binding_kinds(
        cls, value: FrozenSet[AnnotationKind]
    ) -> FrozenSet[AnnotationKind]:
        invalid = sorted(kind.value for kind in value if not kind.is_name_binding)
        if invalid:
            raise ValueError(
                f"Not a name-binding annotation kind: {', '.join(invalid)}"
            )
        return value

    @classmethod
    def minimal(cls, **overrides) -> "ResolverConfig":
        """Variant that only honours query-binding overrides and overwrites flags."""
        values = {
            "merge_mode": MergeMode.OVERWRITE,
            "recognized_name_binding_kinds": QUERY_BINDING_KINDS,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def extended(cls, **overrides) -> "ResolverConfig":
        """Variant that honours query, form, route and header overrides and
        never lowers a flag the generator already set."""
        values = {
            "merge_mode": MergeMode.OR_MERGE,
            "recognized_name_binding_kinds": EXTENDED_BINDING_KINDS,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(cls, prefix: Optional[str] = None) -> "ResolverConfig":
        """Create a configuration from environment variables.

        Reads ``<prefix>MERGE_MODE``, ``<prefix>BINDING_KINDS`` (comma
        separated), ``<prefix>MISSING_NAME_BEHAVIOR`` and
        ``<prefix>DUPLICATE_NAME_BEHAVIOR``. Unset variables keep the model
        defaults.

        Args:
            prefix: Variable prefix, defaults to ``REQUIREDPARAMS_``

        Returns:
            Validated configuration

        Raises:
            pydantic.ValidationError: If a variable holds an unknown value
        """
        prefix = ENV_PREFIX if prefix is None else prefix
        values = {}

        merge_mode = os.getenv(f"{prefix}MERGE_MODE", "").strip().lower()
        if merge_mode:
            values["merge_mode"] = merge_mode

        binding_kinds = os.getenv(f"{prefix}BINDING_KINDS", "").strip()
        if binding_kinds:
            values["recognized_name_binding_kinds"] = frozenset(
                kind.strip().lower() for kind in binding_kinds.split(",") if kind.strip()
            )

        missing = os.getenv(f"{prefix}MISSING_NAME_BEHAVIOR", "").strip().lower()
        if missing:
            values["missing_name_behavior"] = missing

        duplicate = os.getenv(f"{prefix}DUPLICATE_NAME_BEHAVIOR", "").strip().lower()
        if duplicate:
            values["duplicate_name_behavior"] = duplicate

        return cls(**values)


__all__ = [
    "MergeMode",
    "MissingNameBehavior",
    "DuplicateNameBehavior",
    "QUERY_BINDING_KINDS",
    "EXTENDED_BINDING_KINDS",
    "ResolverConfig",
]
