"""Read-only view of a person's question quota for today."""

from fastapi import APIRouter, Request

from astrochat.app.api.dependencies import TrackerDep, parse_body
from astrochat.app.api.schemas import StatusRequest, StatusResponse
from astrochat.app.exceptions import IdentityValidationError

router = APIRouter()


@router.post("/api/user-status", response_model=StatusResponse)
async def user_status(request: Request, tracker: TrackerDep) -> StatusResponse:
    """Report questions used and remaining today without consuming one.

    Returns 503 while question tracking is unavailable, unless the tracker
    was configured to report a fresh status instead.
    """
    status_request = await parse_body(request, StatusRequest)
    user_data = status_request.user_data
    if user_data is None or not user_data.has_identity():
        raise IdentityValidationError()

    status = await tracker.peek_status(user_data.to_person())
    return StatusResponse(**status.to_dict())
