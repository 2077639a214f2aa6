"""
Common response schemas used across multiple endpoints.
"""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    Generic message response for simple operations.

    Used for endpoints that return a success/confirmation message.
    """

    message: str = Field(description="Response message")


class CountResponse(BaseModel):
    """
    Generic count response.
    """

    count: int = Field(ge=0, description="Count of resources")


class HealthResponse(BaseModel):
    """
    Generic health check response.
    """

    status: str = Field(description="Health status message")
