"""Meta Ads daily performance rows, one per campaign / ad set / ad / day / age / gender."""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from dashboard.database import Base


class PerformanceRecord(Base):
    __tablename__ = "performance_data"
    __table_args__ = (
        Index("ix_performance_data_client_day", "client_id", "day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Composite key built by the importer; duplicates are ignored on insert
    unique_id: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    client_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )

    # Dimensions
    account_name: Mapped[str | None] = mapped_column(String(255))
    campaign_name: Mapped[str | None] = mapped_column(String(500))
    ad_set_name: Mapped[str | None] = mapped_column(String(500))
    ad_name: Mapped[str | None] = mapped_column(String(500))
    day: Mapped[date] = mapped_column(Date, nullable=False)
    age: Mapped[str | None] = mapped_column(String(20))
    gender: Mapped[str | None] = mapped_column(String(20))
    objective: Mapped[str | None] = mapped_column(String(100))
    delivery_status: Mapped[str | None] = mapped_column(String(50))
    attribution_setting: Mapped[str | None] = mapped_column(String(100))
    currency: Mapped[str | None] = mapped_column(String(3))
    image_url: Mapped[str | None] = mapped_column(Text)
    ad_preview_link: Mapped[str | None] = mapped_column(Text)

    # Delivery
    spend: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    impressions: Mapped[int] = mapped_column(BigInteger, default=0)
    reach: Mapped[int] = mapped_column(BigInteger, default=0)
    frequency: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    cpm: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    # Clicks
    clicks_all: Mapped[int] = mapped_column(Integer, default=0)
    ctr_all: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    cpc_all: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    link_clicks: Mapped[int] = mapped_column(Integer, default=0)
    unique_link_clicks: Mapped[int] = mapped_column(Integer, default=0)
    ctr_link: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)
    cpc_link: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    outbound_clicks: Mapped[int] = mapped_column(Integer, default=0)
    unique_outbound_clicks: Mapped[int] = mapped_column(Integer, default=0)
    outbound_ctr: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)

    # Engagement
    page_engagement: Mapped[int] = mapped_column(Integer, default=0)
    post_engagement: Mapped[int] = mapped_column(Integer, default=0)
    post_reactions: Mapped[int] = mapped_column(Integer, default=0)
    post_comments: Mapped[int] = mapped_column(Integer, default=0)
    post_shares: Mapped[int] = mapped_column(Integer, default=0)
    post_saves: Mapped[int] = mapped_column(Integer, default=0)
    page_likes: Mapped[int] = mapped_column(Integer, default=0)
    instagram_follows: Mapped[int] = mapped_column(Integer, default=0)

    # Video
    video_plays: Mapped[int] = mapped_column(Integer, default=0)
    video_3s_views: Mapped[int] = mapped_column(Integer, default=0)
    video_thruplays: Mapped[int] = mapped_column(Integer, default=0)
    video_p25: Mapped[int] = mapped_column(Integer, default=0)
    video_p50: Mapped[int] = mapped_column(Integer, default=0)
    video_p75: Mapped[int] = mapped_column(Integer, default=0)
    video_p95: Mapped[int] = mapped_column(Integer, default=0)
    video_p100: Mapped[int] = mapped_column(Integer, default=0)
    video_avg_watch_time: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)  # seconds
    cost_per_thruplay: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    # Funnel
    landing_page_views: Mapped[int] = mapped_column(Integer, default=0)
    cost_per_landing_page_view: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    content_views: Mapped[int] = mapped_column(Integer, default=0)
    adds_to_cart: Mapped[int] = mapped_column(Integer, default=0)
    add_to_cart_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    cost_per_add_to_cart: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    checkouts_initiated: Mapped[int] = mapped_column(Integer, default=0)
    checkout_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    cost_per_checkout: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    payment_info_adds: Mapped[int] = mapped_column(Integer, default=0)
    purchases: Mapped[int] = mapped_column(Integer, default=0)
    purchase_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    cost_per_purchase: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    purchase_roas: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=0)

    # Leads and messaging
    leads: Mapped[int] = mapped_column(Integer, default=0)
    cost_per_lead: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    registrations: Mapped[int] = mapped_column(Integer, default=0)
    cost_per_registration: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    messaging_conversations: Mapped[int] = mapped_column(Integer, default=0)
    cost_per_messaging_conversation: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
