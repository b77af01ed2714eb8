import itertools
import pytest
from dataclasses import replace
from unittest.mock import patch

from dealsim.core import actions as A
from dealsim.core import rules
from dealsim.core import state_machine as sm
from dealsim.core.reducer import apply, make_initial_state, replay
from dealsim.store.models import PauseReason, SimConfig, state_to_dict


@pytest.fixture
def s0():
    return make_initial_state(SimConfig())


def _ack_all():
    return [A.Ack(ack=k, value=True) for k in sm.ACK_KEYS]


def _walk_to(state, stage, limit=10):
    for _ in range(limit):
        if state.stage == stage:
            return state
        state = apply(state, A.RequestAdvance())
    assert state.stage == stage, f"stuck at {state.stage}"
    return state


def test_initial_state_defaults(s0):
    assert s0.stage == sm.DISCOVERY
    assert s0.role == sm.PLATFORM
    assert s0.jurisdictionTier == sm.TIER_A
    assert s0.dealSize == 200_000
    assert s0.depositSatisfied is False
    assert not any(s0.redFlags.values())
    assert not any(s0.acknowledgements.values())
    assert s0.pauseReason == PauseReason.none()
    assert len(s0.events) == 1
    assert s0.events[0].type == sm.EV_INIT
    assert s0.events[0].message == "Simulation initialized."
    assert s0.stateId


def test_apply_never_mutates_input(s0):
    before = state_to_dict(s0)
    s1 = apply(s0, A.ToggleFlag(flag=sm.AML_PRICING_ANOMALY))
    s1 = apply(s1, A.Ack(ack=sm.READ_REQUIRED_DISCLOSURES))
    assert state_to_dict(s0) == before
    assert s1 is not s0
    with pytest.raises(TypeError):
        s1.redFlags[sm.AML_PRICING_ANOMALY] = False


def test_events_are_prepended(s0):
    s1 = apply(s0, A.SetRole(role=sm.BUYER))
    assert s1.events[0].type == sm.EV_SET_ROLE
    assert s1.events[0].message == "Role set to buyer."
    assert s1.events[1] == s0.events[0]


def test_field_setters_log_descriptive_entries(s0):
    s = apply(s0, A.SetJurisdiction(tier=sm.TIER_C))
    assert s.jurisdictionTier == sm.TIER_C
    assert s.events[0].message == "Jurisdiction tier set to C."

    s = apply(s, A.SetDepositSatisfied(value=True))
    assert s.depositSatisfied is True
    assert s.events[0].type == sm.EV_SET_DEPOSIT_SATISFIED

    s = apply(s, A.Ack(ack=sm.ACCEPTED_NON_GOALS, value=True))
    assert s.acknowledgements[sm.ACCEPTED_NON_GOALS] is True
    s = apply(s, A.Ack(ack=sm.ACCEPTED_NON_GOALS, value=False))
    assert s.acknowledgements[sm.ACCEPTED_NON_GOALS] is False


@pytest.mark.parametrize("raw,expected", [(1, 50_000), (250_000, 250_000), (9_999_999, 500_000)])
def test_deal_size_is_clamped(s0, raw, expected):
    s = apply(s0, A.SetDealSize(dealSize=raw))
    assert s.dealSize == expected
    assert s.events[0].message == f"Deal size set to ${expected:,}."


# --- Scenario 1: acknowledgement gating from Discovery ---

def test_buyer_discovery_denied_until_disclosures_read(s0):
    s = replay([A.SetRole(role=sm.BUYER), A.SetJurisdiction(tier=sm.TIER_B), A.RequestAdvance()], s0)
    assert s.stage == sm.DISCOVERY
    assert s.events[0].type == sm.EV_REQUEST_ADVANCE
    assert s.events[0].message.startswith("Advance blocked: Missing required acknowledgement(s)")
    assert sm.READ_REQUIRED_DISCLOSURES in s.events[0].message

    s = replay([A.Ack(ack=sm.READ_REQUIRED_DISCLOSURES), A.RequestAdvance()], s)
    assert s.stage == sm.QUALIFICATION
    assert s.events[0].message == "Advanced from DISCOVERY to QUALIFICATION."


# --- Scenario 2: deposit skip for non-gated tier ---

def test_tier_a_buyer_skips_deposit_stage(s0):
    s = replay([A.SetRole(role=sm.BUYER), A.SetJurisdiction(tier=sm.TIER_A)] + _ack_all(), s0)
    s = _walk_to(s, sm.LIMITED_DATA_ROOM)
    s = apply(s, A.RequestAdvance())
    assert s.stage == sm.IOI_LOI
    assert s.events[0].message == "Advanced from LIMITED_DATA_ROOM to IOI_LOI."


def test_deposit_skip_ignores_deposit_flag(s0):
    s = replay([A.SetRole(role=sm.BUYER), A.SetDepositSatisfied(value=False)] + _ack_all(), s0)
    s = _walk_to(s, sm.LIMITED_DATA_ROOM)
    s = apply(s, A.RequestAdvance())
    assert s.stage == sm.IOI_LOI
    assert s.depositSatisfied is False


# --- Scenario 3: hard-stop pause and recovery ---

@pytest.mark.parametrize("stage", [sm.DISCOVERY, sm.NDA, sm.ESCROW, sm.SETTLEMENT])
def test_hard_stop_flag_pauses_from_any_stage(s0, stage):
    s = replace(s0, stage=stage)
    s = apply(s, A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT))
    assert s.stage == sm.PAUSED
    assert s.pauseReason == PauseReason.red_flag([sm.FRAUD_OWNERSHIP_DOUBT])
    assert s.events[0].type == sm.EV_PAUSE
    assert s.events[0].message == "Pause triggered by hard-stop flag(s): FRAUD_OWNERSHIP_DOUBT."


def test_resume_denied_until_hard_stop_cleared(s0):
    s = replay([A.SetRole(role=sm.BUYER)] + _ack_all(), s0)
    s = _walk_to(s, sm.NDA)
    s = apply(s, A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT))

    denied = apply(s, A.Resume())
    assert denied.stage == sm.PAUSED
    assert denied.events[0].type == sm.EV_RESUME
    assert denied.events[0].message == "Cannot resume: hard-stop flag(s) still active: FRAUD_OWNERSHIP_DOUBT."
    assert len(denied.events) == len(s.events) + 1

    cleared = apply(denied, A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT))
    assert cleared.stage == sm.PAUSED
    assert cleared.redFlags[sm.FRAUD_OWNERSHIP_DOUBT] is False

    resumed = apply(cleared, A.Resume())
    # Safety reset: back to Discovery, not NDA
    assert resumed.stage == sm.DISCOVERY
    assert resumed.pauseReason == PauseReason.none()
    assert resumed.events[0].message == "Resumed (reset to Discovery for safety)."


def test_hard_stop_list_is_recomputed_fresh(s0):
    s = apply(s0, A.ToggleFlag(flag=sm.AML_THIRD_PARTY_PAYER))
    s = apply(s, A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT))
    assert s.pauseReason.flags == (sm.AML_THIRD_PARTY_PAYER, sm.FRAUD_OWNERSHIP_DOUBT)

    s = apply(s, A.ToggleFlag(flag=sm.AML_THIRD_PARTY_PAYER))
    assert s.pauseReason.flags == (sm.FRAUD_OWNERSHIP_DOUBT,)

    # Clear the last hard-stop, then toggle an unrelated signal flag: no stale red-flag pause is rebuilt
    s = apply(s, A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT))
    s = apply(s, A.Resume())
    s = apply(s, A.ToggleFlag(flag=sm.BUYER_VALUATION_MINING))
    assert s.stage == sm.DISCOVERY
    assert s.pauseReason.kind == sm.PAUSE_NONE
    assert s.events[0].message == "Toggled flag BUYER_VALUATION_MINING to True."


def test_request_advance_with_hard_stop_becomes_pause(s0):
    # A hard-stop can only be active outside PAUSED if the config changed under it
    flags = dict(s0.redFlags)
    flags[sm.AML_PRICING_ANOMALY] = True
    s = replace(s0, redFlags=flags, config=SimConfig(hardStopFlags=(sm.AML_PRICING_ANOMALY,)))
    s = apply(s, A.RequestAdvance())
    assert s.stage == sm.PAUSED
    assert s.pauseReason == PauseReason.red_flag([sm.AML_PRICING_ANOMALY])
    assert s.events[0].message == "Pause triggered: Hard-stop flag(s) active: AML_PRICING_ANOMALY."


# --- Scenario 4: signal flags at NDA ---

def test_signal_flag_blocks_nda_to_data_room(s0):
    s = replay([A.SetRole(role=sm.BUYER)] + _ack_all(), s0)
    s = _walk_to(s, sm.NDA)
    s = apply(s, A.ToggleFlag(flag=sm.SELLER_SIGNAL_MINING))
    assert s.stage == sm.NDA

    blocked = apply(s, A.RequestAdvance())
    assert blocked.stage == sm.NDA
    assert "Access-control warning(s) active: SELLER_SIGNAL_MINING" in blocked.events[0].message

    s = replay([A.ToggleFlag(flag=sm.SELLER_SIGNAL_MINING), A.RequestAdvance()], blocked)
    assert s.stage == sm.LIMITED_DATA_ROOM


def test_signal_flags_do_not_block_platform_or_other_stages(s0):
    s = replay(_ack_all() + [A.ToggleFlag(flag=sm.AML_PRICING_ANOMALY)], s0)
    s = _walk_to(s, sm.LIMITED_DATA_ROOM)
    s = replay([A.SetRole(role=sm.SELLER), A.RequestAdvance()], s)
    assert s.stage == sm.IOI_LOI


# --- Deposit gate ---

def _buyer_at_deposit(s0, tier=sm.TIER_B):
    s = replay([A.SetRole(role=sm.BUYER), A.SetJurisdiction(tier=tier)] + _ack_all(), s0)
    return _walk_to(s, sm.DEPOSIT_REQUIRED)


def test_buyer_blocked_until_deposit_satisfied(s0):
    s = _buyer_at_deposit(s0)
    blocked = apply(s, A.RequestAdvance())
    assert blocked.stage == sm.DEPOSIT_REQUIRED
    assert blocked.events[0].message == "Advance blocked: Buyer diligence deposit not satisfied."

    s = replay([A.SetDepositSatisfied(value=True), A.RequestAdvance()], blocked)
    assert s.stage == sm.IOI_LOI


@pytest.mark.parametrize("role", [sm.SELLER, sm.PLATFORM])
def test_non_buyers_pass_gate_without_deposit(s0, role):
    s = _buyer_at_deposit(s0, tier=sm.TIER_C)
    s = replay([A.SetRole(role=role), A.RequestAdvance()], s)
    assert s.stage == sm.IOI_LOI
    assert s.depositSatisfied is False


def test_entering_deposit_stage_resets_satisfaction(s0):
    s = replay([A.SetRole(role=sm.BUYER), A.SetJurisdiction(tier=sm.TIER_B)] + _ack_all(), s0)
    s = _walk_to(s, sm.LIMITED_DATA_ROOM)
    s = apply(s, A.SetDepositSatisfied(value=True))
    s = apply(s, A.RequestAdvance())
    assert s.stage == sm.DEPOSIT_REQUIRED
    assert s.depositSatisfied is False

    # Satisfy, pause, recover, and walk back: gate is fresh again
    s = replay([A.SetDepositSatisfied(value=True), A.Pause(), A.Resume()], s)
    assert s.depositSatisfied is True
    s = _walk_to(s, sm.DEPOSIT_REQUIRED)
    assert s.depositSatisfied is False


# --- Pause / Resume / Reset / terminal ---

def test_manual_pause_always_succeeds(s0):
    s = apply(s0, A.Pause(note="Review requested"))
    assert s.stage == sm.PAUSED
    assert s.pauseReason == PauseReason.manual("Review requested")
    assert s.events[0].message == "Review requested"

    s2 = apply(s, A.Pause())
    assert s2.stage == sm.PAUSED
    assert s2.pauseReason == PauseReason.manual(None)
    assert s2.events[0].message == "Manual pause."


def test_empty_pause_note_is_kept_verbatim(s0):
    s = apply(s0, A.Pause(note=""))
    assert s.pauseReason == PauseReason.manual("")
    assert s.events[0].message == ""


def test_fractional_deal_size_is_clamped(s0):
    s = apply(s0, A.SetDealSize(dealSize=250_000.5))
    assert s.dealSize == 250_000.5
    assert s.events[0].message == "Deal size set to $250,000.5."
    assert apply(s0, A.SetDealSize(dealSize=0.5)).dealSize == 50_000


def test_cannot_advance_while_paused(s0):
    s = replay(_ack_all() + [A.Pause(), A.RequestAdvance()], s0)
    assert s.stage == sm.PAUSED
    assert s.events[0].type == sm.EV_REQUEST_ADVANCE
    assert s.events[0].message == "Cannot advance while paused."


def test_manual_pause_resume_returns_to_discovery(s0):
    s = replay(_ack_all(), s0)
    s = _walk_to(s, sm.ESCROW)
    s = replay([A.Pause(), A.Resume()], s)
    assert s.stage == sm.DISCOVERY


def test_settlement_is_terminal(s0):
    s = replay(_ack_all(), s0)
    s = _walk_to(s, sm.SETTLEMENT)
    s2 = apply(s, A.RequestAdvance())
    assert s2.stage == sm.SETTLEMENT
    assert s2.events[0].message == "Already at final stage."
    assert len(s2.events) == len(s.events) + 1


def test_reset_discards_everything(s0):
    s = replay(_ack_all() + [A.SetRole(role=sm.BUYER), A.ToggleFlag(flag=sm.FRAUD_OWNERSHIP_DOUBT)], s0)
    r = apply(s, A.Reset())
    assert r.stateId != s.stateId
    assert r.stage == sm.DISCOVERY
    assert r.role == sm.PLATFORM
    assert not any(r.redFlags.values())
    assert not any(r.acknowledgements.values())
    assert len(r.events) == 1
    assert r.events[0].type == sm.EV_INIT
    assert r.config == s.config


def test_unknown_action_returns_same_state(s0):
    class Bogus:
        pass

    assert apply(s0, Bogus()) is s0
    assert apply(s0, None) is s0


# --- Invariants ---

ALL_ACTIONS = (
    [A.ToggleFlag(flag=k) for k in sm.RED_FLAG_KEYS]
    + [A.Ack(ack=k, value=v) for k in sm.ACK_KEYS for v in (True, False)]
    + [A.SetRole(role=r) for r in sm.ROLES]
    + [A.SetJurisdiction(tier=t) for t in sm.TIERS]
    + [A.SetDepositSatisfied(value=True), A.RequestAdvance(), A.Pause(), A.Resume()]
)


def test_log_completeness(s0):
    seq = [ALL_ACTIONS[(i * 7) % len(ALL_ACTIONS)] for i in range(60)]
    s = replay(seq, s0)
    assert len(s.events) == len(seq) + 1


def test_hard_stop_invariant_holds_after_every_action(s0):
    seq = [ALL_ACTIONS[(i * 11 + 3) % len(ALL_ACTIONS)] for i in range(120)]
    s = s0
    for action in seq:
        s = apply(s, action)
        if rules.hard_stop_flags(s.redFlags, s.config):
            assert s.stage == sm.PAUSED
            assert s.pauseReason.kind in (sm.PAUSE_RED_FLAG, sm.PAUSE_MANUAL)


@pytest.mark.parametrize("stage,role", list(itertools.product(
    [sm.DISCOVERY, sm.QUALIFICATION, sm.NDA, sm.LIMITED_DATA_ROOM], sm.ROLES)))
def test_acknowledgement_gating_for_every_stage_role(s0, stage, role):
    required = rules.required_acknowledgements(stage, role)
    all_true = replace(s0, stage=stage, role=role, acknowledgements={k: True for k in sm.ACK_KEYS})
    advanced = apply(all_true, A.RequestAdvance())
    assert advanced.stage != stage

    for missing in required:
        acks = {k: True for k in sm.ACK_KEYS}
        acks[missing] = False
        s = apply(replace(all_true, acknowledgements=acks), A.RequestAdvance())
        assert s.stage == stage
        assert missing in s.events[0].message


def _counter_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


def test_replay_is_deterministic_modulo_ids():
    seq = [ALL_ACTIONS[(i * 5 + 1) % len(ALL_ACTIONS)] for i in range(50)]
    runs = []
    for _ in range(2):
        with patch("dealsim.core.reducer.new_id", _counter_ids()), \
                patch("dealsim.core.reducer.now_ms", lambda: 1_700_000_000_000):
            runs.append(replay(seq, make_initial_state(SimConfig())))
    assert runs[0] == runs[1]
    assert state_to_dict(runs[0]) == state_to_dict(runs[1])
