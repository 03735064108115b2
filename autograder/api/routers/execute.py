"""
Code execution router endpoints.

API prefix: /api/
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response
from sqlalchemy.orm import Session

from autograder.api.dependencies import get_db, get_orchestrator
from autograder.api.models.requests import ExecuteRequest
from autograder.api.models.responses import ErrorResponse, ExecuteResponse, PassbackRecordResponse
from autograder.models.database import GradePassback
from autograder.models.results import Language
from autograder.orchestrator import ExecutionOrchestrator
from autograder.repositories.passback_repository import PassbackRepository


router = APIRouter(prefix="/api", tags=["Execution"])

ERROR_STATUS_CODES = {
    "validation_error": 400,
    "unsupported_language": 400,
    "submission_error": 502,
    "timeout": 504,
    "internal_error": 500,
}


def launch_params(request: Request, payload: ExecuteRequest) -> dict:
    """Launch parameters from the query string, completed from the body."""
    params = dict(request.query_params)
    fallbacks = {
        "id_token": payload.id_token,
        "user": payload.user_id,
        "context": payload.context,
        "lineitem": payload.lineitem,
    }
    for key, value in fallbacks.items():
        if not params.get(key) and value:
            params[key] = value
    return params


@router.post(
    "/execute",
    response_model=ExecuteResponse,
    response_model_exclude_none=True,
    summary="Execute Code",
    responses={
        400: {"model": ErrorResponse, "description": "Missing launch data, invalid request or unsupported language"},
        500: {"model": ErrorResponse, "description": "Unexpected internal error"},
        502: {"model": ErrorResponse, "description": "Execution engine failed or unreachable"},
        504: {"model": ErrorResponse, "description": "Execution did not finish in time"},
    },
    description="""
Run submitted code on the execution engine and, when the launch carries a
line item, send the resulting score back to the platform gradebook.

### Status codes
- **200**: the engine produced a verdict (check `accepted` and `score`)
- **400**: missing launch data, invalid request or unsupported language
- **502**: the execution engine failed or could not be reached
- **504**: the execution did not finish in time

Grade passback problems are reported in `passback` and never change the
status code.
    """,
)
async def execute_code(
    payload: ExecuteRequest,
    request: Request,
    response: Response,
    orchestrator: ExecutionOrchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.run(launch_params(request, payload), payload.model_dump())
    if not outcome.success:
        response.status_code = ERROR_STATUS_CODES.get(outcome.error_code, 500)
    return ExecuteResponse.from_outcome(outcome)


@router.get(
    "/languages",
    response_model=list[str],
    summary="List Supported Languages",
)
async def list_languages():
    return [language.value for language in Language]


@router.get(
    "/passbacks/{submission_token}",
    response_model=PassbackRecordResponse,
    summary="Get Grade Passback",
    description="Look up the grade sent back to the platform for one submission token.",
    responses={404: {"description": "No grade was published for this submission"}},
)
def get_passback(
    submission_token: str = Path(..., description="Execution engine submission token"),
    db: Session = Depends(get_db),
):
    record: Optional[GradePassback] = PassbackRepository(db).get_published(submission_token)
    if not record:
        raise HTTPException(status_code=404, detail=f"No grade published for submission {submission_token}")
    return PassbackRecordResponse.model_validate(record)
