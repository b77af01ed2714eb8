from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from dealsim.core import actions as A

RoleName = Literal["seller", "buyer", "platform"]
TierName = Literal["A", "B", "C"]
FlagName = Literal[
    "AML_PRICING_ANOMALY",
    "AML_THIRD_PARTY_PAYER",
    "FRAUD_OWNERSHIP_DOUBT",
    "BUYER_VALUATION_MINING",
    "SELLER_SIGNAL_MINING",
    "REGULATORY_CLASSIFICATION_QUESTION",
]
AckName = Literal[
    "READ_REQUIRED_DISCLOSURES",
    "ACCEPTED_NON_GOALS",
    "ACCEPTED_NEUTRALITY_BOUNDARY",
    "ACCEPTED_CONFIDENTIALITY_TERMS",
]


class SetRoleRequest(BaseModel):
    type: Literal["SET_ROLE"]
    role: RoleName

    def to_action(self):
        return A.SetRole(role=self.role)

class SetJurisdictionRequest(BaseModel):
    type: Literal["SET_JURISDICTION"]
    tier: TierName

    def to_action(self):
        return A.SetJurisdiction(tier=self.tier)

class SetDealSizeRequest(BaseModel):
    type: Literal["SET_DEAL_SIZE"]
    dealSize: Union[int, float]

    def to_action(self):
        return A.SetDealSize(dealSize=self.dealSize)

class ToggleFlagRequest(BaseModel):
    type: Literal["TOGGLE_FLAG"]
    flag: FlagName

    def to_action(self):
        return A.ToggleFlag(flag=self.flag)

class AckRequest(BaseModel):
    type: Literal["ACK"]
    ack: AckName
    value: bool = True

    def to_action(self):
        return A.Ack(ack=self.ack, value=self.value)

class SetDepositSatisfiedRequest(BaseModel):
    type: Literal["SET_DEPOSIT_SATISFIED"]
    value: bool

    def to_action(self):
        return A.SetDepositSatisfied(value=self.value)

class RequestAdvanceRequest(BaseModel):
    type: Literal["REQUEST_ADVANCE"]

    def to_action(self):
        return A.RequestAdvance()

class PauseRequest(BaseModel):
    type: Literal["PAUSE"]
    note: Optional[str] = None

    def to_action(self):
        return A.Pause(note=self.note)

class ResumeRequest(BaseModel):
    type: Literal["RESUME"]

    def to_action(self):
        return A.Resume()

class ResetRequest(BaseModel):
    type: Literal["RESET"]

    def to_action(self):
        return A.Reset()


ActionRequest = Annotated[
    Union[
        SetRoleRequest,
        SetJurisdictionRequest,
        SetDealSizeRequest,
        ToggleFlagRequest,
        AckRequest,
        SetDepositSatisfiedRequest,
        RequestAdvanceRequest,
        PauseRequest,
        ResumeRequest,
        ResetRequest,
    ],
    Field(discriminator="type"),
]


class StateResponse(BaseModel):
    state: Dict[str, Any]
    view: Dict[str, Any]

class EventsResponse(BaseModel):
    stateId: str
    total: int
    events: List[Dict[str, Any]] = Field(default_factory=list)
