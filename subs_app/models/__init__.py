"""
SQLAlchemy models for the subscriptions service.
"""
from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def new_subscription_id() -> str:
    return str(uuid.uuid4())


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_subscriptions_price_non_negative"),)

    id = Column(Text, primary_key=True, default=new_subscription_id)
    service_name = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    user_id = Column(Text, nullable=False, index=True)
    # Calendar months, always stored on day 1.
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
