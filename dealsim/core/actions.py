from dataclasses import dataclass
from typing import Optional, Union

from dealsim.core import state_machine as sm


def _check(value: str, allowed, what: str) -> None:
    if value not in allowed:
        raise ValueError(f"Unknown {what}: {value!r}")


@dataclass(frozen=True)
class SetRole:
    role: str

    def __post_init__(self):
        _check(self.role, sm.ROLES, "role")


@dataclass(frozen=True)
class SetJurisdiction:
    tier: str

    def __post_init__(self):
        _check(self.tier, sm.TIERS, "jurisdiction tier")


@dataclass(frozen=True)
class SetDealSize:
    dealSize: Union[int, float]


@dataclass(frozen=True)
class ToggleFlag:
    flag: str

    def __post_init__(self):
        _check(self.flag, sm.RED_FLAG_KEYS, "red flag")


@dataclass(frozen=True)
class Ack:
    ack: str
    value: bool = True

    def __post_init__(self):
        _check(self.ack, sm.ACK_KEYS, "acknowledgement")


@dataclass(frozen=True)
class SetDepositSatisfied:
    value: bool


@dataclass(frozen=True)
class RequestAdvance:
    pass


@dataclass(frozen=True)
class Pause:
    note: Optional[str] = None


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Action = Union[
    SetRole,
    SetJurisdiction,
    SetDealSize,
    ToggleFlag,
    Ack,
    SetDepositSatisfied,
    RequestAdvance,
    Pause,
    Resume,
    Reset,
]
