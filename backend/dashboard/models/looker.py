from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dashboard.database import Base


class LookerAdCreative(Base):
    """Creative image and preview link per client ad, consumed by Looker Studio reports."""

    __tablename__ = "looker_data"
    __table_args__ = (
        UniqueConstraint("client_id", "ad_name", name="uq_looker_data_client_ad"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    ad_name: Mapped[str] = mapped_column(String(500), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text)
    ad_preview_link: Mapped[str | None] = mapped_column(Text)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )
