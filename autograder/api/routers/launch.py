"""
LTI launch router endpoints.

The launch token's signature and issuer are verified before these endpoints
run; they only turn launch parameters into a LaunchContext for the editor.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from autograder.api.dependencies import get_resolver
from autograder.api.models.requests import LaunchClaimsRequest
from autograder.api.models.responses import LaunchContextResponse
from autograder.exceptions import ValidationError
from autograder.managers.launch_manager import LaunchContextResolver


router = APIRouter(prefix="/lti", tags=["Launch"])


def _respond(resolve, *args) -> LaunchContextResponse:
    try:
        context = resolve(*args)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_caller_message())
    return LaunchContextResponse.from_context(context)


@router.get(
    "/launch",
    response_model=LaunchContextResponse,
    summary="Resolve Launch (query)",
    description="Resolve `id_token`, `user`, `context` and optional `lineitem` query parameters.",
)
async def launch_from_query(
    request: Request,
    resolver: LaunchContextResolver = Depends(get_resolver),
):
    return _respond(resolver.resolve, dict(request.query_params))


@router.post(
    "/launch",
    response_model=LaunchContextResponse,
    summary="Resolve Launch (form)",
    description="Resolve launch parameters posted as a form.",
)
async def launch_from_form(
    request: Request,
    resolver: LaunchContextResolver = Depends(get_resolver),
):
    form = await request.form()
    params = {key: value for key, value in form.items() if isinstance(value, str)}
    return _respond(resolver.resolve, params)


@router.post(
    "/launch/claims",
    response_model=LaunchContextResponse,
    summary="Resolve Launch (claims)",
    description="""
Resolve a verified LTI 1.3 launch from its decoded claims. The user comes from
`sub`, the context from the context claim and the line item, when present, from
the AGS endpoint claim.
    """,
)
async def launch_from_claims(
    payload: LaunchClaimsRequest,
    resolver: LaunchContextResolver = Depends(get_resolver),
):
    return _respond(resolver.from_claims, payload.id_token, payload.claims)
