from sqlalchemy import Column, Integer, String, DateTime, Numeric, Boolean, JSON

from foodsewa.data.database import Base
from foodsewa.domain.enums import CustomerSegment
from foodsewa.utils.timeutil import utcnow, as_utc


class DiscountModel(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True)
    restaurant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    type = Column(String(20), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    code = Column(String(50), nullable=False, unique=True)

    min_order_amount = Column(Numeric(10, 2), nullable=False, default=0)
    max_discount = Column(Numeric(10, 2), nullable=False, default=0)
    usage_limit = Column(Integer, nullable=False, default=0)
    used_count = Column(Integer, nullable=False, default=0)
    user_limit = Column(Integer, nullable=False, default=1)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    applicable_items = Column(JSON, nullable=False, default=list)
    customer_segment = Column(String(20), nullable=False, default=CustomerSegment.ALL.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def status(self) -> str:
        now = utcnow()
        if as_utc(self.end_date) < now:
            return "expired"
        if as_utc(self.start_date) > now:
            return "scheduled"
        return "active"
