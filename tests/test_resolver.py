"""Test suite for RequiredParameterResolver."""

import logging

import pytest
from pydantic import ValidationError

from requiredparams.config import (
    QUERY_BINDING_KINDS,
    DuplicateNameBehavior,
    MergeMode,
    MissingNameBehavior,
    ResolverConfig,
)
from requiredparams.exceptions import (
    AmbiguousCanonicalNameError,
    UnresolvedParameterNameError,
)
from requiredparams.models import (
    AnnotationKind,
    DocumentedParameter,
    HandlerParameter,
    ParameterAnnotation,
)
from requiredparams.resolver import (
    RequiredParameterResolver,
    resolve_required_parameters,
)

REQUIRED = ParameterAnnotation(kind=AnnotationKind.REQUIRED)
FROM_QUERY = ParameterAnnotation(kind=AnnotationKind.FROM_QUERY)


def from_query(name=None):
    return ParameterAnnotation(kind=AnnotationKind.FROM_QUERY, override_name=name)


def handler(name, *annotations):
    return HandlerParameter(declared_name=name, annotations=annotations)


@pytest.fixture
def handler_parameters():
    """Handler signature: (uid [FromQuery(Name="uid")] [Required], page [FromQuery])."""
    return [
        handler("uid", from_query("uid"), REQUIRED),
        handler("page", FROM_QUERY),
    ]


@pytest.fixture
def documented():
    """Draft parameters as the generator produced them."""
    return [
        DocumentedParameter(name="uid", required=False),
        DocumentedParameter(name="page", required=True),
    ]


def flags(parameters):
    return [(p.name, p.required) for p in parameters]


class TestCanonicalName:
    """Test canonical name resolution."""

    def test_declared_name_without_binding(self):
        """Test that a parameter without binding annotation keeps its name."""
        resolver = RequiredParameterResolver()
        assert resolver.canonical_name(handler("id")) == "id"

    def test_override_name_from_query_binding(self):
        """Test that a query binding's override name wins."""
        resolver = RequiredParameterResolver()
        assert resolver.canonical_name(handler("userId", from_query("uid"))) == "uid"

    def test_bare_binding_falls_back_to_declared_name(self):
        """Test that a binding without override falls back to the declared name."""
        resolver = RequiredParameterResolver()
        assert resolver.canonical_name(handler("page", FROM_QUERY)) == "page"

    def test_empty_override_falls_back_to_declared_name(self):
        """Test that an empty override counts as no override."""
        resolver = RequiredParameterResolver()
        assert resolver.canonical_name(handler("page", from_query(""))) == "page"

    def test_first_binding_annotation_wins(self):
        """Test that only the first recognized binding is considered."""
        resolver = RequiredParameterResolver()
        parameter = handler(
            "token",
            REQUIRED,
            ParameterAnnotation(kind=AnnotationKind.FROM_HEADER, override_name="X-Token"),
            from_query("token_q"),
        )
        assert resolver.canonical_name(parameter) == "X-Token"

    def test_unrecognized_binding_is_ignored(self):
        """Test that the minimal variant ignores non-query bindings."""
        resolver = RequiredParameterResolver(ResolverConfig.minimal())
        parameter = handler(
            "item_id",
            ParameterAnnotation(kind=AnnotationKind.FROM_ROUTE, override_name="id"),
        )
        assert resolver.canonical_name(parameter) == "item_id"

    def test_extended_variant_honours_route_binding(self):
        """Test that the extended variant uses route binding overrides."""
        resolver = RequiredParameterResolver(ResolverConfig.extended())
        parameter = handler(
            "item_id",
            ParameterAnnotation(kind=AnnotationKind.FROM_ROUTE, override_name="id"),
        )
        assert resolver.canonical_name(parameter) == "id"

    def test_cookie_binding_only_when_configured(self):
        """Test that cookie bindings are opt-in."""
        parameter = handler(
            "session",
            ParameterAnnotation(kind=AnnotationKind.FROM_COOKIE, override_name="sid"),
        )
        assert RequiredParameterResolver().canonical_name(parameter) == "session"

        config = ResolverConfig(
            recognized_name_binding_kinds={AnnotationKind.FROM_COOKIE}
        )
        assert RequiredParameterResolver(config).canonical_name(parameter) == "sid"


class TestRequiredMap:
    """Test the canonical name to required flag mapping."""

    def test_required_presence_only(self, handler_parameters):
        """Test that required-ness is the presence of a Required annotation."""
        resolver = RequiredParameterResolver()
        assert resolver.build_required_map(handler_parameters) == {
            "uid": True,
            "page": False,
        }

    def test_duplicate_first_wins(self, caplog):
        """Test that the first value is kept for a duplicated canonical name."""
        resolver = RequiredParameterResolver()
        parameters = [
            handler("a", from_query("q"), REQUIRED),
            handler("b", from_query("q")),
        ]

        with caplog.at_level(logging.WARNING, logger="requiredparams.resolver"):
            result = resolver.build_required_map(parameters)

        assert result == {"q": True}
        assert "disagree on required" in caplog.text

    def test_duplicate_agreeing_is_silent(self, caplog):
        """Test that agreeing duplicates do not warn."""
        resolver = RequiredParameterResolver()
        parameters = [handler("a", from_query("q")), handler("b", from_query("q"))]

        with caplog.at_level(logging.WARNING, logger="requiredparams.resolver"):
            result = resolver.build_required_map(parameters)

        assert result == {"q": False}
        assert caplog.text == ""

    def test_duplicate_fails_when_configured(self):
        """Test that duplicates raise under the strict policy."""
        config = ResolverConfig(duplicate_name_behavior=DuplicateNameBehavior.FAIL)
        resolver = RequiredParameterResolver(config)
        parameters = [handler("a", from_query("q")), handler("b", from_query("q"))]

        with pytest.raises(AmbiguousCanonicalNameError) as exc_info:
            resolver.build_required_map(parameters)

        assert exc_info.value.canonical_name == "q"
        assert exc_info.value.declared_names == ["a", "b"]


class TestResolve:
    """Test in-place correction of documented parameters."""

    def test_overwrite(self, documented, handler_parameters):
        """Test the end-to-end scenario under overwrite."""
        RequiredParameterResolver(
            ResolverConfig(merge_mode=MergeMode.OVERWRITE)
        ).resolve(documented, handler_parameters)

        assert flags(documented) == [("uid", True), ("page", False)]

    def test_or_merge(self, documented, handler_parameters):
        """Test the end-to-end scenario under OR merge."""
        RequiredParameterResolver(
            ResolverConfig(merge_mode=MergeMode.OR_MERGE)
        ).resolve(documented, handler_parameters)

        assert flags(documented) == [("uid", True), ("page", True)]

    def test_or_merge_never_lowers_flag(self):
        """Test that OR merge keeps a prior true flag."""
        documented = [DocumentedParameter(name="q", required=True)]
        resolve_required_parameters(
            documented, [handler("q")], merge_mode=MergeMode.OR_MERGE
        )
        assert documented[0].required is True

    def test_string_merge_mode_is_coerced(self):
        """Test that a merge mode given as a string still OR-merges."""
        documented = [DocumentedParameter(name="q", required=True)]
        resolve_required_parameters(documented, [handler("q")], merge_mode="or_merge")
        assert documented[0].required is True

    def test_invalid_string_merge_mode_rejected(self):
        """Test that an unknown merge mode fails validation."""
        with pytest.raises(ValidationError):
            resolve_required_parameters([], [], merge_mode="sometimes")

    def test_overwrite_sets_required_regardless_of_prior(self):
        """Test that Required wins over any prior value under overwrite."""
        for prior in (True, False):
            documented = [DocumentedParameter(name="q", required=prior)]
            resolve_required_parameters(
                documented, [handler("q", REQUIRED)], merge_mode=MergeMode.OVERWRITE
            )
            assert documented[0].required is True

    def test_overwrite_is_idempotent(self, documented, handler_parameters):
        """Test that resolving twice equals resolving once."""
        resolver = RequiredParameterResolver()
        resolver.resolve(documented, handler_parameters)
        once = flags(documented)

        resolver.resolve(documented, handler_parameters)
        assert flags(documented) == once

    def test_empty_documented_list(self):
        """Test that an operation without parameters is a no-op."""
        documented = []
        RequiredParameterResolver().resolve(documented, [handler("ignored")])
        assert documented == []

    def test_missing_name_fails_fast(self, handler_parameters):
        """Test that an unknown documented name raises by default."""
        documented = [DocumentedParameter(name="ghost", required=False)]

        with pytest.raises(UnresolvedParameterNameError) as exc_info:
            RequiredParameterResolver().resolve(documented, handler_parameters)

        assert exc_info.value.parameter_name == "ghost"
        assert exc_info.value.available_names == ["page", "uid"]
        assert exc_info.value.details["parameter_name"] == "ghost"

    def test_missing_name_skipped_when_configured(self, handler_parameters):
        """Test that an unknown documented name is left unchanged."""
        config = ResolverConfig(
            missing_name_behavior=MissingNameBehavior.SKIP_UNCHANGED
        )
        documented = [
            DocumentedParameter(name="ghost", required=True),
            DocumentedParameter(name="uid", required=False),
        ]

        RequiredParameterResolver(config).resolve(documented, handler_parameters)

        assert flags(documented) == [("ghost", True), ("uid", True)]

    def test_functional_form_overrides_merge_mode(self, documented, handler_parameters):
        """Test that the functional form's merge mode beats the config's."""
        config = ResolverConfig(
            merge_mode=MergeMode.OVERWRITE,
            recognized_name_binding_kinds=QUERY_BINDING_KINDS,
        )
        resolve_required_parameters(
            documented, handler_parameters, merge_mode=MergeMode.OR_MERGE, config=config
        )

        assert flags(documented) == [("uid", True), ("page", True)]
        # The caller's config is left untouched
        assert config.merge_mode is MergeMode.OVERWRITE
