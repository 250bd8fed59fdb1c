from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from ..dependencies import get_gatekeeper
from ..gatekeeper import Gatekeeper
from ..rate_limit import client_key_for

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("")
def submit_payment(
    request: Request,
    body: Any = Body(default=None),
    gatekeeper: Gatekeeper = Depends(get_gatekeeper),
) -> JSONResponse:
    """
    Body: {recipientName?, payeeAccountNumber, swiftCode, amount, currency, memo?}.
    200 {message, transaction} with status "Pending" | 400 {errors} | 429.
    """
    outcome = gatekeeper.submit_payment(client_key_for(request), body)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body, headers=outcome.headers)
