import dataclasses

import pytest

from autograder.exceptions import ValidationError
from autograder.managers.launch_manager import (
    AGS_ENDPOINT_CLAIM,
    CONTEXT_CLAIM,
    LaunchContextResolver,
)


@pytest.fixture
def resolver():
    return LaunchContextResolver()


def test_resolve_builds_context(resolver):
    context = resolver.resolve({
        "id_token": "tok",
        "user": "2",
        "context": "course-7",
        "lineitem": "http://platform.test/lineitems/1",
    })

    assert context.identity_token == "tok"
    assert context.user_id == "2"
    assert context.context_id == "course-7"
    assert context.grade_target_ref == "http://platform.test/lineitems/1"
    assert context.gradeable


def test_resolve_without_lineitem_is_not_gradeable(resolver):
    context = resolver.resolve({"id_token": "tok", "user": "2", "context": "c", "lineitem": "  "})

    assert context.grade_target_ref is None
    assert not context.gradeable


@pytest.mark.parametrize("missing", ["id_token", "user", "context"])
def test_resolve_rejects_missing_required(resolver, missing):
    params = {"id_token": "tok", "user": "2", "context": "c"}
    del params[missing]

    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve(params)

    assert missing in str(exc_info.value)
    assert exc_info.value.to_caller_message().startswith("validation_error:")


@pytest.mark.parametrize("blank", ["", "   ", None])
def test_resolve_rejects_blank_values(resolver, blank):
    with pytest.raises(ValidationError):
        resolver.resolve({"id_token": "tok", "user": blank, "context": "c"})


def test_context_is_immutable(resolver):
    context = resolver.resolve({"id_token": "tok", "user": "2", "context": "c"})

    with pytest.raises(dataclasses.FrozenInstanceError):
        context.user_id = "3"


def test_from_claims_maps_lti_claims(resolver):
    claims = {
        "sub": "2",
        CONTEXT_CLAIM: {"id": "course-7", "title": "Intro to Programming"},
        AGS_ENDPOINT_CLAIM: {"lineitem": "http://platform.test/lineitems/9", "scope": []},
    }

    context = resolver.from_claims("tok", claims)

    assert context.user_id == "2"
    assert context.context_id == "course-7"
    assert context.grade_target_ref == "http://platform.test/lineitems/9"


def test_from_claims_without_ags_endpoint(resolver):
    context = resolver.from_claims("tok", {"sub": "2", CONTEXT_CLAIM: {"id": "course-7"}})

    assert not context.gradeable


def test_from_claims_missing_context_fails(resolver):
    with pytest.raises(ValidationError):
        resolver.from_claims("tok", {"sub": "2"})


def test_from_claims_malformed_claim_fails(resolver):
    with pytest.raises(ValidationError):
        resolver.from_claims("tok", {"sub": "2", CONTEXT_CLAIM: "course-7"})
