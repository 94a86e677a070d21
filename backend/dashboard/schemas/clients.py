from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


class ClientIn(BaseModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    logo: str | None = None
    currency: str = Field("EUR", min_length=3, max_length=3)
    meta_account_name: str | None = Field(None, max_length=255)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


class ClientResponse(BaseModel):
    id: str
    name: str
    logo: str | None
    currency: str
    meta_account_name: str | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ClientMetricsResponse(BaseModel):
    client_id: str
    start_date: date | None = None
    end_date: date | None = None
    spend: float = 0
    impressions: int = 0
    clicks: int = 0
    purchases: int = 0
    purchase_value: float = 0
    roas: float = 0
    cpa: float = 0
    aov: float = 0
    ctr: float = 0


class CampaignSummaryResponse(BaseModel):
    campaign_name: str | None
    spend: float = 0
    impressions: int = 0
    purchases: int = 0
    purchase_value: float = 0
    roas: float = 0
