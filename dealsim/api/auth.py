import hmac

from fastapi import Header, HTTPException
from dealsim.settings import settings


def require_api_key(x_api_key: str = Header(default="", alias="x-api-key")):
    """
    Guards the simulator's /api routes (state reads and action dispatch alike).
    - API_KEY unset: the simulator is open, which suits local demos.
    - API_KEY set: every /api call must carry it in x-api-key; /health and / stay open.
    """
    expected = settings.API_KEY
    if not expected:
        return
    if not hmac.compare_digest(x_api_key.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Invalid API key")
