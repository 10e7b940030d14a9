from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from lead_api.core.config import DeliverySettings, get_delivery_settings, settings
from lead_api.core.errors import AppError
from lead_api.core.exception_handlers import error_response
from lead_api.core.rate_limit import resolve_client_id
from lead_api.schemas.lead import ErrorResponse, LeadAcceptedResponse, LeadSubmission
from lead_api.services.lead_service import LeadService

router = APIRouter(tags=["Leads"])


def get_lead_service(request: Request) -> LeadService:
    """Return the lead service owned by the running application."""
    return request.app.state.lead_service


@router.post(
    "/lead",
    response_model=LeadAcceptedResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body or invalid fields"},
        429: {"model": ErrorResponse, "description": "Too many submissions from this client"},
        500: {"model": ErrorResponse, "description": "Server misconfiguration or delivery failure"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": LeadSubmission.model_json_schema()}},
        }
    },
)
async def submit_lead(
    request: Request,
    service: Annotated[LeadService, Depends(get_lead_service)],
    delivery: Annotated[DeliverySettings, Depends(get_delivery_settings)],
) -> JSONResponse:
    """Accept a heating-analysis lead and email it to the business inbox.

    The body is read raw and handed to the submission pipeline, which checks
    configuration, rate limit, JSON shape and field rules before sending the
    business notification and then the submitter's confirmation.

    Returns:
        JSONResponse: ``{"success": true}`` (200) once both emails were sent,
            otherwise ``{"error": "..."}`` with 400, 429 or 500.
    """
    client_id = resolve_client_id(
        request,
        trust_forwarded_for=settings.app.trust_forwarded_for,
    )
    body = await request.body()

    outcome = await service.submit(client_id=client_id, body=body, delivery=delivery)
    if isinstance(outcome, AppError):
        return error_response(outcome)
    return JSONResponse(status_code=200, content={"success": True})
