# src/coffee/models/alert.py
"""SQLAlchemy model for saved search alerts."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coffee.db.session import Base
from coffee.db.time import new_id, utcnow

ALERT_TYPES = ("name", "location", "phone")


class Alert(Base):
    """Search term a member wants to hear about when new posts match it."""

    __tablename__ = "alerts"
    __table_args__ = (
        CheckConstraint(
            "alert_type IN ('name', 'location', 'phone')",
            name="ck_alerts_alert_type",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    alert_type: Mapped[str] = mapped_column(String(16), nullable=False)
    # Stored lower-cased and trimmed.
    alert_term: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
