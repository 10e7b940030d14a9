"""Pydantic schemas for the lead endpoint (used for OpenAPI documentation).

The endpoint itself reads the raw body: malformed JSON and field errors are
reported with the form's own messages rather than FastAPI's 422 payload.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LeadSubmission(BaseModel):
    """Fields accepted by ``POST /api/lead``."""

    buildingType: Literal["nowy", "istniejący"] = Field(
        ..., description="Building type: new ('nowy') or existing ('istniejący')."
    )
    area: str = Field(..., description="Heated area in m²; its leading number must be between 20 and 2000.")
    location: str = Field(..., description="Voivodeship (region).")
    email: str = Field(..., description="Submitter's email address.")
    phone: str = Field(..., description="Phone number with at least 9 digits.")
    currentHeating: str | None = Field(default=None, description="Current heat source.")
    installation: str | None = Field(default=None, description="Heating installation type.")
    hasPV: str | None = Field(default=None, description="Whether a PV system is installed.")
    pvPower: str | None = Field(default=None, description="PV power in kWp.")
    hasStorage: str | None = Field(default=None, description="Whether energy storage is installed.")
    storageCapacity: str | None = Field(default=None, description="Storage capacity in kWh.")
    notes: str | None = Field(default=None, description="Free-text notes (max 2000 chars).")


class LeadAcceptedResponse(BaseModel):
    """Returned once both the notification and the confirmation were sent."""

    success: bool = Field(True, description="Always true.")


class ErrorResponse(BaseModel):
    """Error body shared by every failure status."""

    error: str = Field(..., description="Client-safe, human-readable message.")
