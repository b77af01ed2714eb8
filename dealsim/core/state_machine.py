# Pipeline vocabulary (kept as plain string constants, stored as-is on SimState)

# Stage: Initial listing discovery
# Gate: disclosures read
DISCOVERY = "DISCOVERY"

# Stage: Party qualification
# Gate: disclosures + role boundary acknowledgement
QUALIFICATION = "QUALIFICATION"

# Stage: Confidentiality gate
# Gate: confidentiality terms; signal flags block the next step
NDA = "NDA"

# Stage: Limited data room access
LIMITED_DATA_ROOM = "LIMITED_DATA_ROOM"

# Stage: Diligence deposit (buyer) / verification gate (others)
# Only entered when the jurisdiction tier requires it
DEPOSIT_REQUIRED = "DEPOSIT_REQUIRED"

# Stage: Indication of interest / letter of intent
IOI_LOI = "IOI_LOI"

# Stage: Escrow readiness
ESCROW = "ESCROW"

# Stage: Settlement (final, no successor)
SETTLEMENT = "SETTLEMENT"

# Out-of-band: review hold. Not part of the forward ordering.
PAUSED = "PAUSED"

STAGES = (
    DISCOVERY,
    QUALIFICATION,
    NDA,
    LIMITED_DATA_ROOM,
    DEPOSIT_REQUIRED,
    IOI_LOI,
    ESCROW,
    SETTLEMENT,
)
ALL_STAGES = STAGES + (PAUSED,)


# Roles
SELLER = "seller"
BUYER = "buyer"
PLATFORM = "platform"  # neutral observer

ROLES = (SELLER, BUYER, PLATFORM)


# Jurisdiction tiers (enforcement strength)
TIER_A = "A"
TIER_B = "B"
TIER_C = "C"

TIERS = (TIER_A, TIER_B, TIER_C)


# Red flags
AML_PRICING_ANOMALY = "AML_PRICING_ANOMALY"
AML_THIRD_PARTY_PAYER = "AML_THIRD_PARTY_PAYER"
FRAUD_OWNERSHIP_DOUBT = "FRAUD_OWNERSHIP_DOUBT"
BUYER_VALUATION_MINING = "BUYER_VALUATION_MINING"
SELLER_SIGNAL_MINING = "SELLER_SIGNAL_MINING"
REGULATORY_CLASSIFICATION_QUESTION = "REGULATORY_CLASSIFICATION_QUESTION"

RED_FLAG_KEYS = (
    AML_PRICING_ANOMALY,
    AML_THIRD_PARTY_PAYER,
    FRAUD_OWNERSHIP_DOUBT,
    BUYER_VALUATION_MINING,
    SELLER_SIGNAL_MINING,
    REGULATORY_CLASSIFICATION_QUESTION,
)

# Signal-only flags never pause; they block NDA -> LIMITED_DATA_ROOM for non-platform roles.
SIGNAL_FLAGS = (
    AML_PRICING_ANOMALY,
    BUYER_VALUATION_MINING,
    SELLER_SIGNAL_MINING,
)


# Acknowledgements
READ_REQUIRED_DISCLOSURES = "READ_REQUIRED_DISCLOSURES"
ACCEPTED_NON_GOALS = "ACCEPTED_NON_GOALS"
ACCEPTED_NEUTRALITY_BOUNDARY = "ACCEPTED_NEUTRALITY_BOUNDARY"
ACCEPTED_CONFIDENTIALITY_TERMS = "ACCEPTED_CONFIDENTIALITY_TERMS"

ACK_KEYS = (
    READ_REQUIRED_DISCLOSURES,
    ACCEPTED_NON_GOALS,
    ACCEPTED_NEUTRALITY_BOUNDARY,
    ACCEPTED_CONFIDENTIALITY_TERMS,
)


# Pause reason kinds
PAUSE_NONE = "NONE"
PAUSE_RED_FLAG = "RED_FLAG"
PAUSE_MANUAL = "MANUAL"


# Event log types (Reset re-initializes and logs INIT)
EV_INIT = "INIT"
EV_SET_ROLE = "SET_ROLE"
EV_SET_JURISDICTION = "SET_JURISDICTION"
EV_SET_DEAL_SIZE = "SET_DEAL_SIZE"
EV_TOGGLE_FLAG = "TOGGLE_FLAG"
EV_ACK = "ACK"
EV_SET_DEPOSIT_SATISFIED = "SET_DEPOSIT_SATISFIED"
EV_REQUEST_ADVANCE = "REQUEST_ADVANCE"
EV_PAUSE = "PAUSE"
EV_RESUME = "RESUME"
