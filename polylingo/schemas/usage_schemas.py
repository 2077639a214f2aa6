from pydantic import BaseModel, Field


class UsageStats(BaseModel):
    """
    Daily usage figures for one client.
    """

    used: int = Field(ge=0, description="Units translated today")
    limit: int = Field(ge=0, description="Daily unit limit")
    remaining: int = Field(ge=0, description="Units left today")
