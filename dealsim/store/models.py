from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from dealsim.core import state_machine as sm
from dealsim.settings import settings


def _frozen(d: Mapping[str, bool]) -> Mapping[str, bool]:
    return MappingProxyType(dict(d))


def blank_red_flags() -> Mapping[str, bool]:
    return _frozen({k: False for k in sm.RED_FLAG_KEYS})


def blank_acknowledgements() -> Mapping[str, bool]:
    return _frozen({k: False for k in sm.ACK_KEYS})


@dataclass(frozen=True)
class SimConfig:
    minDealSize: int = 50_000
    maxDealSize: int = 500_000
    # Order is preserved; hard-stop reporting follows this order
    depositRequiredTiers: Tuple[str, ...] = (sm.TIER_B, sm.TIER_C)
    hardStopFlags: Tuple[str, ...] = (
        sm.AML_THIRD_PARTY_PAYER,
        sm.FRAUD_OWNERSHIP_DOUBT,
        sm.REGULATORY_CLASSIFICATION_QUESTION,
    )

    def __post_init__(self):
        if self.minDealSize > self.maxDealSize:
            raise ValueError(f"minDealSize {self.minDealSize} exceeds maxDealSize {self.maxDealSize}")
        # Accept any iterable but store tuples so the config stays hashable/immutable
        object.__setattr__(self, "depositRequiredTiers", tuple(self.depositRequiredTiers))
        object.__setattr__(self, "hardStopFlags", tuple(self.hardStopFlags))
        bad_tiers = [t for t in self.depositRequiredTiers if t not in sm.TIERS]
        if bad_tiers:
            raise ValueError(f"Unknown jurisdiction tier(s): {bad_tiers}")
        bad_flags = [f for f in self.hardStopFlags if f not in sm.RED_FLAG_KEYS]
        if bad_flags:
            raise ValueError(f"Unknown red flag(s): {bad_flags}")


def default_config() -> SimConfig:
    """Build the policy config from the environment-backed settings."""
    return SimConfig(
        minDealSize=settings.MIN_DEAL_SIZE,
        maxDealSize=settings.MAX_DEAL_SIZE,
        depositRequiredTiers=settings.DEPOSIT_REQUIRED_TIERS,
        hardStopFlags=settings.HARD_STOP_FLAGS,
    )


@dataclass(frozen=True)
class PauseReason:
    """
    Tagged variant: NONE | RED_FLAG(flags) | MANUAL(note).
    INVARIANT: RED_FLAG always names at least one flag.
    """
    kind: str = sm.PAUSE_NONE
    flags: Tuple[str, ...] = ()
    note: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "flags", tuple(self.flags))
        if self.kind == sm.PAUSE_RED_FLAG:
            if not self.flags:
                raise ValueError("RED_FLAG pause reason requires at least one flag")
        elif self.kind == sm.PAUSE_MANUAL:
            if self.flags:
                raise ValueError("MANUAL pause reason carries no flags")
        elif self.kind == sm.PAUSE_NONE:
            if self.flags or self.note is not None:
                raise ValueError("NONE pause reason carries no flags or note")
        else:
            raise ValueError(f"Unknown pause reason kind: {self.kind}")

    @classmethod
    def none(cls) -> "PauseReason":
        return cls()

    @classmethod
    def red_flag(cls, flags) -> "PauseReason":
        return cls(kind=sm.PAUSE_RED_FLAG, flags=tuple(flags))

    @classmethod
    def manual(cls, note: Optional[str] = None) -> "PauseReason":
        return cls(kind=sm.PAUSE_MANUAL, note=note)


@dataclass(frozen=True)
class EventLogEntry:
    id: str
    ts: int
    type: str
    message: str


@dataclass(frozen=True)
class SimState:
    stage: str = sm.DISCOVERY
    role: str = sm.PLATFORM
    jurisdictionTier: str = sm.TIER_A
    dealSize: int = 200_000
    depositSatisfied: bool = False

    redFlags: Mapping[str, bool] = field(default_factory=blank_red_flags)
    acknowledgements: Mapping[str, bool] = field(default_factory=blank_acknowledgements)
    pauseReason: PauseReason = field(default_factory=PauseReason.none)

    # Most recent first; never evicted for the lifetime of the session
    events: Tuple[EventLogEntry, ...] = ()
    config: SimConfig = field(default_factory=SimConfig)
    stateId: str = ""

    def __post_init__(self):
        # Snapshots are read-only: wrap mappings, freeze the log
        if not isinstance(self.redFlags, MappingProxyType):
            object.__setattr__(self, "redFlags", _frozen(self.redFlags))
        if not isinstance(self.acknowledgements, MappingProxyType):
            object.__setattr__(self, "acknowledgements", _frozen(self.acknowledgements))
        object.__setattr__(self, "events", tuple(self.events))


def pause_reason_to_dict(reason: PauseReason) -> Dict[str, Any]:
    out: Dict[str, Any] = {"kind": reason.kind}
    if reason.kind == sm.PAUSE_RED_FLAG:
        out["flags"] = list(reason.flags)
    if reason.note is not None:
        out["note"] = reason.note
    return out


def event_to_dict(e: EventLogEntry) -> Dict[str, Any]:
    return {"id": e.id, "ts": e.ts, "type": e.type, "message": e.message}


def state_to_dict(state: SimState) -> Dict[str, Any]:
    """JSON-safe camelCase view of a full snapshot."""
    cfg = state.config
    return {
        "stateId": state.stateId,
        "stage": state.stage,
        "role": state.role,
        "jurisdictionTier": state.jurisdictionTier,
        "dealSize": state.dealSize,
        "depositSatisfied": state.depositSatisfied,
        "redFlags": dict(state.redFlags),
        "acknowledgements": dict(state.acknowledgements),
        "pauseReason": pause_reason_to_dict(state.pauseReason),
        "events": [event_to_dict(e) for e in state.events],
        "config": {
            "minDealSize": cfg.minDealSize,
            "maxDealSize": cfg.maxDealSize,
            "depositRequiredTiers": list(cfg.depositRequiredTiers),
            "hardStopFlags": list(cfg.hardStopFlags),
        },
    }
