"""
Pipeline policy rules
---------------------
Pure functions over (state fields, config). This module is the ONE place that
decides acknowledgement requirements, hard-stops and the advance gate; the
reducer and the selectors both call into it and never re-derive gating.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from dealsim.core import state_machine as sm
from dealsim.store.models import SimConfig, SimState

# Advance-gate outcomes, in precedence order
BLOCK_PAUSED = "paused"
BLOCK_HARD_STOP = "hard_stop"
BLOCK_MISSING_ACKS = "missing_acknowledgements"
BLOCK_SIGNAL_FLAGS = "signal_flags"
BLOCK_DEPOSIT = "deposit_unsatisfied"


@dataclass(frozen=True)
class AdvanceBlock:
    kind: str
    message: str
    keys: Tuple[str, ...] = ()


_STAGE_LABELS = {
    sm.DISCOVERY: "Discovery",
    sm.QUALIFICATION: "Qualification",
    sm.NDA: "NDA Gate",
    sm.LIMITED_DATA_ROOM: "Limited Data Room",
    sm.IOI_LOI: "IOI / LOI",
    sm.ESCROW: "Escrow",
    sm.SETTLEMENT: "Settlement",
    sm.PAUSED: "Paused",
}


def stage_order() -> Tuple[str, ...]:
    return sm.STAGES


def stage_label(stage: str, role: Optional[str] = None) -> str:
    if stage == sm.DEPOSIT_REQUIRED:
        return "Diligence Deposit" if role == sm.BUYER else "Verification Gate"
    return _STAGE_LABELS.get(stage, stage)


def next_stage(current: str) -> Optional[str]:
    """Successor by position in STAGES; None for the last stage, PAUSED or unknown input."""
    if current not in sm.STAGES:
        return None
    idx = sm.STAGES.index(current)
    if idx == len(sm.STAGES) - 1:
        return None
    return sm.STAGES[idx + 1]


def hard_stop_flags(red_flags: Mapping[str, bool], config: SimConfig) -> List[str]:
    return [k for k in config.hardStopFlags if red_flags.get(k)]


def active_signal_flags(red_flags: Mapping[str, bool]) -> List[str]:
    return [k for k in sm.SIGNAL_FLAGS if red_flags.get(k)]


def requires_gate(tier: str, config: SimConfig) -> bool:
    return tier in config.depositRequiredTiers


def required_acknowledgements(stage: str, role: str) -> List[str]:
    """
    Role-aware acknowledgement requirements for leaving `stage`.
    NDA deliberately requires only the confidentiality terms: disclosures were
    already gated at Discovery and Qualification and are not re-required there.
    """
    base = [sm.READ_REQUIRED_DISCLOSURES]

    if stage == sm.DISCOVERY:
        return base

    if stage == sm.QUALIFICATION:
        if role == sm.SELLER:
            return base + [sm.ACCEPTED_NON_GOALS]
        if role == sm.BUYER:
            return base + [sm.ACCEPTED_NEUTRALITY_BOUNDARY]
        return base

    if stage == sm.NDA:
        return [sm.ACCEPTED_CONFIDENTIALITY_TERMS]

    return []


def missing_acknowledgements(stage: str, role: str, acknowledgements: Mapping[str, bool]) -> List[str]:
    return [k for k in required_acknowledgements(stage, role) if not acknowledgements.get(k)]


def is_acknowledgement_relevant(ack: str, role: str) -> bool:
    """Buyers never accept seller non-goals; sellers never accept the buyer neutrality boundary."""
    if role == sm.BUYER:
        return ack != sm.ACCEPTED_NON_GOALS
    if role == sm.SELLER:
        return ack != sm.ACCEPTED_NEUTRALITY_BOUNDARY
    return True


def clamp_deal_size(value, config: SimConfig):
    return max(config.minDealSize, min(config.maxDealSize, value))


def resolve_advance_target(stage: str, tier: str, config: SimConfig) -> Optional[str]:
    """next_stage with the deposit-skip rule: non-gated tiers land on IOI_LOI directly."""
    ns = next_stage(stage)
    if ns == sm.DEPOSIT_REQUIRED and not requires_gate(tier, config):
        return sm.IOI_LOI
    return ns


def evaluate_advance(state: SimState) -> Optional[AdvanceBlock]:
    """
    Returns the first failing advance check, or None when advance is permitted.
    Order of precedence:
      0) PAUSED                                   -> "paused"
      1) hard-stop flags active                   -> "hard_stop" (caller pauses)
      2) required acknowledgements missing        -> "missing_acknowledgements"
      3) non-platform at NDA with signal flags    -> "signal_flags"
      4) buyer at gated DEPOSIT_REQUIRED unpaid   -> "deposit_unsatisfied"
    """
    if state.stage == sm.PAUSED:
        return AdvanceBlock(BLOCK_PAUSED, "Cannot advance while paused.")

    hard = hard_stop_flags(state.redFlags, state.config)
    if hard:
        return AdvanceBlock(BLOCK_HARD_STOP, f"Hard-stop flag(s) active: {', '.join(hard)}.", tuple(hard))

    missing = missing_acknowledgements(state.stage, state.role, state.acknowledgements)
    if missing:
        return AdvanceBlock(
            BLOCK_MISSING_ACKS,
            f"Missing required acknowledgement(s): {', '.join(missing)}.",
            tuple(missing),
        )

    # Signal flags only guard entry into the Limited Data Room
    if state.role != sm.PLATFORM and state.stage == sm.NDA:
        active = active_signal_flags(state.redFlags)
        if active:
            return AdvanceBlock(
                BLOCK_SIGNAL_FLAGS,
                f"Access-control warning(s) active: {', '.join(active)}. Clear before Limited Data Room.",
                tuple(active),
            )

    if (
        state.stage == sm.DEPOSIT_REQUIRED
        and state.role == sm.BUYER
        and requires_gate(state.jurisdictionTier, state.config)
        and not state.depositSatisfied
    ):
        return AdvanceBlock(BLOCK_DEPOSIT, "Buyer diligence deposit not satisfied.")

    return None
