"""Lead submission API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response, status

from lead_capture.api.dependencies import get_orchestrator
from lead_capture.core.submissions.service import SubmissionOrchestrator
from lead_capture.domain.models import SubmissionOutcome, SubmissionStatus

router = APIRouter(prefix="/leads", tags=["leads"])

STATUS_CODES = {
    SubmissionStatus.SUCCESS: status.HTTP_201_CREATED,
    SubmissionStatus.DEGRADED_SUCCESS: status.HTTP_202_ACCEPTED,
    SubmissionStatus.REJECTED_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _with_request_metadata(fields: dict[str, Any], request: Request) -> dict[str, Any]:
    """Fill capture metadata from request headers when the form omits it."""
    fields = dict(fields)
    if not (fields.get("user_agent") or fields.get("userAgent")):
        user_agent = request.headers.get("user-agent")
        if user_agent:
            fields["user_agent"] = user_agent
    referer = request.headers.get("referer")
    if referer and not fields.get("referrer"):
        fields["referrer"] = referer
    return fields


@router.post("", response_model=SubmissionOutcome, status_code=201)
async def submit_lead(
    request: Request,
    response: Response,
    fields: Annotated[dict[str, Any], Body()],
    orchestrator: Annotated[SubmissionOrchestrator, Depends(get_orchestrator)],
) -> SubmissionOutcome:
    """
    Submit a contact form lead.

    Returns **201** when the lead was stored remotely, **202** when it was
    recorded locally for later delivery, and **422** with field errors when
    the input needs correcting.
    """
    outcome = await orchestrator.submit(_with_request_metadata(fields, request))
    response.status_code = STATUS_CODES[outcome.status]
    return outcome
