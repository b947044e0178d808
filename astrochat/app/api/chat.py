"""Chat endpoint: quota check, prompt, model call, formatted reply."""

from fastapi import APIRouter, HTTPException, Request

from astrochat.app.api.dependencies import (
    ProviderDep,
    SettingsDep,
    TrackerDep,
    parse_body,
)
from astrochat.app.api.schemas import ChatRequest, ChatResponse, Segment, UserLimitInfo
from astrochat.app.core.clock import utc_now
from astrochat.app.core.logging import get_log_context, get_logger
from astrochat.app.exceptions import (
    DailyLimitExceededError,
    GenerationError,
    StorageConflictError,
    StorageUnavailableError,
)
from astrochat.app.middleware.request_id import get_request_id
from astrochat.app.services.formatting import parse_reply, pick_fallback_response
from astrochat.app.services.prompts import build_astrology_prompt
from astrochat.app.services.quota_tracker import resolve_key

router = APIRouter()
logger = get_logger(__name__)


@router.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    request: Request,
    tracker: TrackerDep,
    provider: ProviderDep,
    config: SettingsDep,
) -> ChatResponse:
    """Answer one astrology question.

    1. Validates the message and the birth details
    2. Counts the question against the daily quota (429 once exhausted)
    3. Sends the prompt to the language model
    4. Returns the reply, its segments and the updated counters

    If question tracking is unavailable the question is still answered
    (unless quota_fail_open is off). If the model fails, a fallback reply is
    returned with `fallback: true`.
    """
    request_id = get_request_id(request)
    chat_request = await parse_body(request, ChatRequest)

    message = chat_request.message
    if not isinstance(message, str) or not message.strip():
        raise HTTPException(status_code=400, detail="Please provide a valid message")
    if len(message) > config.max_message_length:
        raise HTTPException(
            status_code=400,
            detail=(
                "Message too long. Please keep it under "
                f"{config.max_message_length} characters."
            ),
        )

    user_data = chat_request.user_data
    if user_data is None or not user_data.has_birth_details():
        raise HTTPException(
            status_code=400,
            detail="Complete birth details are required for accurate Vedic astrology reading.",
        )
    person = user_data.to_person()
    user_key = resolve_key(person.first_name, person.date_of_birth)

    limit_info = None
    try:
        decision = await tracker.check_and_consume(person)
    except (StorageUnavailableError, StorageConflictError) as exc:
        if not config.quota_fail_open:
            raise
        logger.error(
            f"Question tracking failed, answering without quota: {type(exc).__name__}",
            extra=get_log_context(request_id=request_id, user_key=user_key),
        )
    else:
        if not decision.allowed_this_request:
            raise DailyLimitExceededError(
                daily_limit=decision.daily_limit,
                questions_used=decision.questions_used_today,
            )
        limit_info = UserLimitInfo(**decision.to_dict())

    prompt = build_astrology_prompt(person, message)
    fallback = False
    try:
        reply = await provider.generate(prompt)
    except GenerationError as exc:
        logger.warning(
            f"Language model failed, serving fallback reply: {exc.message}",
            extra=get_log_context(request_id=request_id, user_key=user_key),
        )
        reply = pick_fallback_response()
        fallback = True

    return ChatResponse(
        response=reply,
        segments=[Segment(**s.to_dict()) for s in parse_reply(reply)],
        timestamp=utc_now(),
        user_limit_info=limit_info,
        fallback=fallback,
    )
