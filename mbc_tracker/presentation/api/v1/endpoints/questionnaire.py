"""
Patient-facing magic-link questionnaire endpoints.

The token in the path is the only credential. Completed, cancelled and
expired links never return question content.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from mbc_tracker.presentation.api.dependencies import (
    LifecycleDep,
    get_client_ip,
    get_user_agent,
)
from mbc_tracker.presentation.api.v1.schemas.questionnaire import (
    QuestionnaireResponse,
    SubmissionResponse,
    SubmitAnswersRequest,
)

router = APIRouter()

ClientIp = Annotated[str | None, Depends(get_client_ip)]
UserAgent = Annotated[str | None, Depends(get_user_agent)]


@router.get(
    "/{token}",
    response_model=QuestionnaireResponse,
    summary="Open an assessment link",
    responses={
        404: {"description": "Unknown link"},
        409: {"description": "Completed or cancelled"},
        410: {"description": "Link expired"},
    },
)
async def open_questionnaire(
    token: str,
    lifecycle: LifecycleDep,
    ip_address: ClientIp,
    user_agent: UserAgent,
) -> QuestionnaireResponse:
    view = await lifecycle.open_link(token, ip_address=ip_address, user_agent=user_agent)
    return QuestionnaireResponse.from_view(view)


@router.post(
    "/{token}",
    response_model=SubmissionResponse,
    summary="Submit answers for an assessment link",
)
async def submit_questionnaire(
    token: str,
    payload: SubmitAnswersRequest,
    lifecycle: LifecycleDep,
    ip_address: ClientIp,
    user_agent: UserAgent,
) -> SubmissionResponse:
    result = await lifecycle.submit(
        token,
        [answer.to_domain() for answer in payload.answers],
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return SubmissionResponse.from_result(result)
