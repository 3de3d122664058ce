"""Health check response schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response.

    Design Decision: Literal types for status values

    Rationale: Literal types give type-checker safety and FastAPI renders
    them as enums in the OpenAPI document without separate Enum classes.
    """

    status: Literal["ok", "degraded", "error"] = Field(
        ...,
        description="Service health status",
        examples=["ok"],
    )
    version: str = Field(
        ...,
        description="API version",
        examples=["1.0.0"],
    )
    database: Literal["connected", "disconnected"] = Field(
        ...,
        description="Database connection status",
        examples=["connected"],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "ok",
                    "version": "1.0.0",
                    "database": "connected",
                }
            ]
        }
    }
