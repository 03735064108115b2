from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    """
    Code execution request from the tool's editor.

    Fields are optional at the schema level so that missing values are
    reported by the orchestrator with the regular execution response body.
    """

    model_config = ConfigDict(extra="ignore")

    code: Optional[str] = Field(
        None,
        description="Source code to execute",
        examples=["print(1)"],
    )
    language: Optional[str] = Field(
        None,
        description="One of: go, python, java, nodejs, cpp, c",
        examples=["python"],
    )
    user_id: Optional[str] = Field(
        None,
        description="Platform user identifier from the launch",
        examples=["2"],
    )
    lineitem: Optional[str] = Field(
        None,
        description="AGS line item URL; when absent no grade is sent back",
        examples=["http://localhost:8888/mod/lti/services.php/2/lineitems/1/lineitem?type_id=1"],
    )
    id_token: Optional[str] = Field(
        None,
        description="Launch id_token",
    )
    context: Optional[str] = Field(
        None,
        description="Platform context (course) identifier from the launch",
        examples=["2"],
    )
    max_score: Optional[float] = Field(
        None,
        description="Score awarded for an accepted submission",
        examples=[100],
    )


class LaunchClaimsRequest(BaseModel):
    """Verified LTI 1.3 launch: the raw id_token with its decoded claims."""

    id_token: str = Field(..., description="Launch id_token the claims were decoded from")
    claims: Dict[str, Any] = Field(
        ...,
        description="Decoded id_token claims (`sub`, context claim, optional AGS endpoint claim)",
        examples=[{
            "sub": "2",
            "https://purl.imsglobal.org/spec/lti/claim/context": {"id": "2"},
            "https://purl.imsglobal.org/spec/lti-ags/claim/endpoint": {
                "lineitem": "http://localhost:8888/mod/lti/services.php/2/lineitems/1/lineitem?type_id=1",
            },
        }],
    )
