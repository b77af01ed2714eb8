"""Read-only projections over a SimState snapshot. Gating is delegated to rules.evaluate_advance."""

from typing import Any, Dict, List, Optional

from dealsim.core import rules
from dealsim.core import state_machine as sm
from dealsim.store.models import EventLogEntry, SimState


def current_stage_title(state: SimState) -> str:
    return rules.stage_label(state.stage, state.role)


def is_paused(state: SimState) -> bool:
    return state.stage == sm.PAUSED


def required_acks(state: SimState) -> List[str]:
    return rules.required_acknowledgements(state.stage, state.role)


def missing_acks(state: SimState) -> List[str]:
    return rules.missing_acknowledgements(state.stage, state.role, state.acknowledgements)


def advance_blocked_reason(state: SimState) -> Optional[str]:
    block = rules.evaluate_advance(state)
    return block.message if block is not None else None


def can_advance(state: SimState) -> bool:
    return rules.evaluate_advance(state) is None


def gate_required(state: SimState) -> bool:
    return rules.requires_gate(state.jurisdictionTier, state.config)


def gate_copy(state: SimState) -> Dict[str, str]:
    # Buyers post a deposit; other roles see a platform-side verification step
    if state.role == sm.BUYER:
        return {
            "title": "Diligence Deposit (simulation)",
            "help": "If a tier requires a diligence deposit, the buyer posts it before IOI/LOI.",
            "toggleLabel": "Mark deposit posted",
        }
    return {
        "title": "Verification Gate (simulation)",
        "help": "No seller deposit in this pilot. This stage represents platform-side verification before IOI/LOI.",
        "toggleLabel": "Mark verification complete",
    }


def relevant_acknowledgements(state: SimState) -> List[str]:
    return [k for k in sm.ACK_KEYS if rules.is_acknowledgement_relevant(k, state.role)]


def stage_pipeline(state: SimState) -> List[Dict[str, Any]]:
    chips = [
        {"stage": s, "label": rules.stage_label(s, state.role), "active": state.stage == s}
        for s in rules.stage_order()
    ]
    chips.append({"stage": sm.PAUSED, "label": rules.stage_label(sm.PAUSED), "active": is_paused(state)})
    return chips


def pause_summary(state: SimState) -> Optional[str]:
    if not is_paused(state):
        return None
    reason = state.pauseReason
    text = f"Reason: {reason.kind}"
    if reason.kind == sm.PAUSE_RED_FLAG:
        text += f" ({', '.join(reason.flags)})"
    if reason.kind == sm.PAUSE_MANUAL and reason.note:
        text += f": {reason.note}"
    return text


def recent_events(state: SimState, limit: Optional[int] = None) -> List[EventLogEntry]:
    """Newest first. Truncates the view only; the log itself is untouched."""
    if limit is None or limit < 0:
        return list(state.events)
    return list(state.events[:limit])
