from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dealsim.api.routes import router
from dealsim.settings import settings
from dealsim.observability.logging import log

app = FastAPI(title="Deal Pipeline Governance Simulator")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Simulation only: no real listings, funds, KYC, or escrow. Use GET /api/state and POST /api/actions.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


log(
    "boot",
    depositRequiredTiers=list(settings.DEPOSIT_REQUIRED_TIERS),
    hardStopFlags=list(settings.HARD_STOP_FLAGS),
    minDealSize=settings.MIN_DEAL_SIZE,
    maxDealSize=settings.MAX_DEAL_SIZE,
)
