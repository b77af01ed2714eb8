"""
Engine reducer
--------------
apply(state, action) -> new state. This is the unique write path for SimState.
Every known action appends exactly one audit entry (denials and no-ops included),
so the event log is a complete causal trace of dispatched intents.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from dealsim.core import actions as A
from dealsim.core import rules
from dealsim.core import state_machine as sm
from dealsim.observability.logging import log
from dealsim.settings import settings
from dealsim.store.models import (
    EventLogEntry,
    PauseReason,
    SimConfig,
    SimState,
    blank_acknowledgements,
    blank_red_flags,
    default_config,
)
from dealsim.utils.time import new_id, now_ms


def _append(state: SimState, ev_type: str, message: str) -> SimState:
    entry = EventLogEntry(id=new_id(), ts=now_ms(), type=ev_type, message=message)
    return replace(state, events=(entry,) + state.events)


def make_initial_state(config: Optional[SimConfig] = None) -> SimState:
    cfg = config or default_config()
    s = SimState(
        stage=sm.DISCOVERY,
        role=sm.PLATFORM,
        jurisdictionTier=sm.TIER_A,
        dealSize=rules.clamp_deal_size(settings.DEFAULT_DEAL_SIZE, cfg),
        depositSatisfied=False,
        redFlags=blank_red_flags(),
        acknowledgements=blank_acknowledgements(),
        pauseReason=PauseReason.none(),
        events=(),
        config=cfg,
        stateId=new_id(),
    )
    log("engine_init", stateId=s.stateId)
    return _append(s, sm.EV_INIT, "Simulation initialized.")


def _enter_stage(state: SimState, stage: str, message: str) -> SimState:
    s2 = replace(state, stage=stage, pauseReason=PauseReason.none())
    log("engine_stage", stateId=state.stateId, frm=state.stage, to=stage)
    return _append(s2, sm.EV_REQUEST_ADVANCE, message)


def _enter_pause(state: SimState, reason: PauseReason, message: str) -> SimState:
    s2 = replace(state, stage=sm.PAUSED, pauseReason=reason)
    log(
        "engine_pause",
        stateId=state.stateId,
        frm=state.stage,
        kind=reason.kind,
        flags=list(reason.flags),
        note=reason.note,
    )
    return _append(s2, sm.EV_PAUSE, message)


def _request_advance(state: SimState) -> SimState:
    block = rules.evaluate_advance(state)
    if block is not None:
        if block.kind == rules.BLOCK_PAUSED:
            return _append(state, sm.EV_REQUEST_ADVANCE, block.message)
        if block.kind == rules.BLOCK_HARD_STOP:
            # A hard-stop converts the denial into a pause transition
            return _enter_pause(state, PauseReason.red_flag(block.keys), f"Pause triggered: {block.message}")
        log("engine_advance_blocked", stateId=state.stateId, stage=state.stage, kind=block.kind)
        return _append(state, sm.EV_REQUEST_ADVANCE, f"Advance blocked: {block.message}")

    target = rules.resolve_advance_target(state.stage, state.jurisdictionTier, state.config)
    if target is None:
        return _append(state, sm.EV_REQUEST_ADVANCE, "Already at final stage.")

    if target == sm.DEPOSIT_REQUIRED:
        # Fresh gate on every traversal
        state = replace(state, depositSatisfied=False)

    return _enter_stage(state, target, f"Advanced from {state.stage} to {target}.")


def _toggle_flag(state: SimState, flag: str) -> SimState:
    flags = dict(state.redFlags)
    flags[flag] = not flags.get(flag, False)
    s2 = replace(state, redFlags=flags)

    # Recompute on the new flags; any active hard-stop overrides the plain toggle
    hard = rules.hard_stop_flags(s2.redFlags, s2.config)
    if hard:
        return _enter_pause(
            s2,
            PauseReason.red_flag(hard),
            f"Pause triggered by hard-stop flag(s): {', '.join(hard)}.",
        )
    return _append(s2, sm.EV_TOGGLE_FLAG, f"Toggled flag {flag} to {flags[flag]}.")


def _resume(state: SimState) -> SimState:
    hard = rules.hard_stop_flags(state.redFlags, state.config)
    if hard:
        return _append(
            state,
            sm.EV_RESUME,
            f"Cannot resume: hard-stop flag(s) still active: {', '.join(hard)}.",
        )
    # Safety reset: pipeline position is not restored
    s2 = replace(state, stage=sm.DISCOVERY, pauseReason=PauseReason.none())
    log("engine_resume", stateId=state.stateId, frm=state.stage)
    return _append(s2, sm.EV_RESUME, "Resumed (reset to Discovery for safety).")


def apply(state: SimState, action) -> SimState:
    if isinstance(action, A.SetRole):
        return _append(replace(state, role=action.role), sm.EV_SET_ROLE, f"Role set to {action.role}.")

    if isinstance(action, A.SetJurisdiction):
        return _append(
            replace(state, jurisdictionTier=action.tier),
            sm.EV_SET_JURISDICTION,
            f"Jurisdiction tier set to {action.tier}.",
        )

    if isinstance(action, A.SetDealSize):
        deal_size = rules.clamp_deal_size(action.dealSize, state.config)
        return _append(replace(state, dealSize=deal_size), sm.EV_SET_DEAL_SIZE, f"Deal size set to ${deal_size:,}.")

    if isinstance(action, A.ToggleFlag):
        return _toggle_flag(state, action.flag)

    if isinstance(action, A.Ack):
        acks = dict(state.acknowledgements)
        acks[action.ack] = bool(action.value)
        return _append(
            replace(state, acknowledgements=acks),
            sm.EV_ACK,
            f"Acknowledgement {action.ack} set to {bool(action.value)}.",
        )

    if isinstance(action, A.SetDepositSatisfied):
        return _append(
            replace(state, depositSatisfied=bool(action.value)),
            sm.EV_SET_DEPOSIT_SATISFIED,
            f"Deposit satisfied set to {bool(action.value)}.",
        )

    if isinstance(action, A.RequestAdvance):
        return _request_advance(state)

    if isinstance(action, A.Pause):
        message = action.note if action.note is not None else "Manual pause."
        return _enter_pause(state, PauseReason.manual(action.note), message)

    if isinstance(action, A.Resume):
        return _resume(state)

    if isinstance(action, A.Reset):
        log("engine_reset", stateId=state.stateId)
        return make_initial_state(state.config)

    log("engine_unknown_action", stateId=state.stateId, action=type(action).__name__)
    return state


def replay(actions: Iterable, state: Optional[SimState] = None) -> SimState:
    """Fold actions over `state` (or a fresh initial state) in dispatch order."""
    s = state if state is not None else make_initial_state()
    for action in actions:
        s = apply(s, action)
    return s
