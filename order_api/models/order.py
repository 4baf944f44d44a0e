"""Order model definitions."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Float, Integer, String
from order_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Order(Base):
    """Represents a customer order."""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("price >= 1", name="ck_orders_price_min"),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    product_category = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    order_date = Column(DateTime, nullable=False)
    created_by = Column(String, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)
