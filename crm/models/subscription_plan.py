"""Subscription plan model - pricing catalogue"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String, Text

from crm.database import Base
from crm.timeutils import utcnow


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="INR")
    billing_period = Column(String(50), nullable=False, default="monthly")  # monthly, yearly, one-time
    features = Column(JSON, nullable=True)  # list of feature strings
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_custom = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<SubscriptionPlan(id={self.id}, name='{self.name}', price={self.price} {self.currency})>"
