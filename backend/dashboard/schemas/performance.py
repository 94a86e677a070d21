from datetime import date

from pydantic import BaseModel, Field


class PerformanceMetrics(BaseModel):
    # NaN and Infinity would poison every sum over the NUMERIC columns
    model_config = {"allow_inf_nan": False}

    # Delivery
    spend: float = 0
    impressions: int = 0
    reach: int = 0
    frequency: float = 0
    cpm: float = 0

    # Clicks
    clicks_all: int = 0
    ctr_all: float = 0
    cpc_all: float = 0
    link_clicks: int = 0
    unique_link_clicks: int = 0
    ctr_link: float = 0
    cpc_link: float = 0
    outbound_clicks: int = 0
    unique_outbound_clicks: int = 0
    outbound_ctr: float = 0

    # Engagement
    page_engagement: int = 0
    post_engagement: int = 0
    post_reactions: int = 0
    post_comments: int = 0
    post_shares: int = 0
    post_saves: int = 0
    page_likes: int = 0
    instagram_follows: int = 0

    # Video
    video_plays: int = 0
    video_3s_views: int = 0
    video_thruplays: int = 0
    video_p25: int = 0
    video_p50: int = 0
    video_p75: int = 0
    video_p95: int = 0
    video_p100: int = 0
    video_avg_watch_time: float = 0
    cost_per_thruplay: float = 0

    # Funnel
    landing_page_views: int = 0
    cost_per_landing_page_view: float = 0
    content_views: int = 0
    adds_to_cart: int = 0
    add_to_cart_value: float = 0
    cost_per_add_to_cart: float = 0
    checkouts_initiated: int = 0
    checkout_value: float = 0
    cost_per_checkout: float = 0
    payment_info_adds: int = 0
    purchases: int = 0
    purchase_value: float = 0
    cost_per_purchase: float = 0
    purchase_roas: float = 0

    # Leads and messaging
    leads: int = 0
    cost_per_lead: float = 0
    registrations: int = 0
    cost_per_registration: float = 0
    messaging_conversations: int = 0
    cost_per_messaging_conversation: float = 0


class PerformanceRecordIn(PerformanceMetrics):
    """One exported Meta Ads row. Unknown columns from the export are dropped."""

    model_config = {"extra": "ignore"}

    unique_id: str = Field(min_length=1, max_length=500)
    day: date
    account_name: str | None = None
    campaign_name: str | None = None
    ad_set_name: str | None = None
    ad_name: str | None = None
    age: str | None = None
    gender: str | None = None
    objective: str | None = None
    delivery_status: str | None = None
    attribution_setting: str | None = None
    currency: str | None = Field(None, max_length=3)
    image_url: str | None = None
    ad_preview_link: str | None = None


class PerformanceRecordResponse(PerformanceRecordIn):
    id: int
    client_id: str

    model_config = {"from_attributes": True}


# client id -> rows for that client
PerformanceDataRequest = dict[str, list[PerformanceRecordIn]]
