from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import TypeAdapter, ValidationError

from dealsim.api.auth import require_api_key
from dealsim.api.normalize import normalize_action_payload
from dealsim.api.schemas import ActionRequest, EventsResponse, StateResponse
from dealsim.core import selectors
from dealsim.observability.logging import log
from dealsim.settings import settings
from dealsim.store.models import SimState, event_to_dict, state_to_dict
from dealsim.store.session_store import get_store

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])

_action_adapter = TypeAdapter(ActionRequest)


def build_view(state: SimState) -> Dict[str, Any]:
    """Everything a client needs to render controls, derived only from selectors."""
    return {
        "stageTitle": selectors.current_stage_title(state),
        "paused": selectors.is_paused(state),
        "pauseSummary": selectors.pause_summary(state),
        "requiredAcknowledgements": selectors.required_acks(state),
        "missingAcknowledgements": selectors.missing_acks(state),
        "relevantAcknowledgements": selectors.relevant_acknowledgements(state),
        "blockedReason": selectors.advance_blocked_reason(state),
        "canAdvance": selectors.can_advance(state),
        "gateRequired": selectors.gate_required(state),
        "gate": selectors.gate_copy(state),
        "pipeline": selectors.stage_pipeline(state),
    }


def _respond(state: SimState) -> StateResponse:
    return StateResponse(state=state_to_dict(state), view=build_view(state))


@router.get("/state", response_model=StateResponse)
def get_state():
    return _respond(get_store().snapshot())


@router.get("/view")
def get_view():
    return build_view(get_store().snapshot())


@router.get("/events", response_model=EventsResponse)
def get_events(limit: Optional[int] = Query(default=None, ge=0)):
    state = get_store().snapshot()
    n = settings.EVENT_LOG_VIEW_LIMIT if limit is None else limit
    return EventsResponse(
        stateId=state.stateId,
        total=len(state.events),
        events=[event_to_dict(e) for e in selectors.recent_events(state, n)],
    )


@router.post("/actions", response_model=StateResponse)
def post_action(payload: Any = Body(None)):
    """Validate one action body and dispatch it to the engine."""
    normalized = normalize_action_payload(payload)
    try:
        req = _action_adapter.validate_python(normalized)
    except ValidationError as e:
        log("api_action_rejected", errors=len(e.errors()))
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    state = get_store().dispatch(req.to_action())
    return _respond(state)


@router.post("/reset", response_model=StateResponse)
def post_reset():
    return _respond(get_store().reset())
