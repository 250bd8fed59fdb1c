from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from ..dependencies import get_gatekeeper
from ..gatekeeper import Gatekeeper
from ..rate_limit import client_key_for

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Login — pre-provisioned accounts only, no sign-up route
# ---------------------------------------------------------------------------

@router.post("/login")
def login(
    request: Request,
    body: Any = Body(default=None),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> JSONResponse:
    """
    Body: {idNumber, password}.
    200 {message, user: {id, fullName}} | 400 {errors} | 401 | 404 | 429.
    """
    outcome = gatekeeper.login(client_key_for(request), body)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body, headers=outcome.headers)
