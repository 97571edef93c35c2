"""Pydantic schema for API error responses."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["INVALID_PAYMENT_AMOUNT"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Amount 150050 does not match any combination of due installments"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )
    details: Dict[str, Any] | None = Field(
        None,
        description="Machine-readable context, e.g. a suggested amount",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "INVALID_PAYMENT_AMOUNT",
                    "message": "Amount 150050 does not match any combination of due installments",
                    "request_id": "abc123",
                    "details": {
                        "amount_paise": 150050,
                        "suggested_amount_paise": 150000,
                        "next_installment_amount_paise": 150000,
                        "nearest_lower_amount_paise": 150000,
                        "suggested_installments": 1,
                    },
                }
            ]
        }
    }
