"""FastAPI dependencies resolving the components built in the lifespan.

Usage:
    @router.post("/api/chat")
    async def chat(tracker: TrackerDep, provider: ProviderDep):
        ...
"""

import json
from typing import Annotated, Any, TypeVar

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from astrochat.app.core.config import Settings
from astrochat.app.providers.base import BaseProvider
from astrochat.app.services.quota_tracker import QuotaTracker

ModelT = TypeVar("ModelT", bound=BaseModel)


def _state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Ensure lifespan context is active.")
    return value


def get_tracker(request: Request) -> QuotaTracker:
    return _state(request, "tracker")


def get_provider(request: Request) -> BaseProvider:
    return _state(request, "provider")


def get_app_settings(request: Request) -> Settings:
    return _state(request, "settings")


async def parse_body(request: Request, model: type[ModelT]) -> ModelT:
    """Parse the request body as a JSON object into model, or fail with 400.

    Field presence is checked by the endpoint so each one can word its own
    error; this only rejects bodies that are not objects of the right shape.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON in request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise HTTPException(status_code=400, detail=f"Invalid request body: {fields}")


TrackerDep = Annotated[QuotaTracker, Depends(get_tracker)]
ProviderDep = Annotated[BaseProvider, Depends(get_provider)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
