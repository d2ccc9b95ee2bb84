from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from foodsewa.data.database import Base
from foodsewa.domain.enums import OrderStatus
from foodsewa.utils.timeutil import utcnow

#customers may only cancel before the kitchen starts
CUSTOMER_CANCELLABLE = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value}

#restaurant side: action -> (allowed source statuses, target status)
TRANSITIONS = {
    "confirm": ({OrderStatus.PENDING.value}, OrderStatus.CONFIRMED.value),
    "start-preparing": ({OrderStatus.CONFIRMED.value}, OrderStatus.PREPARING.value),
    "mark-ready": ({OrderStatus.PREPARING.value}, OrderStatus.READY.value),
    "out-for-delivery": ({OrderStatus.READY.value}, OrderStatus.OUT_FOR_DELIVERY.value),
    "deliver": (
        {OrderStatus.READY.value, OrderStatus.OUT_FOR_DELIVERY.value},
        OrderStatus.DELIVERED.value,
    ),
    "cancel": (
        {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value, OrderStatus.PREPARING.value},
        OrderStatus.CANCELLED.value,
    ),
}


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(20), nullable=False, unique=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id = Column(String(64), nullable=False, index=True)
    restaurant_name = Column(String(100), nullable=True)

    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    order_type = Column(String(20), nullable=False)
    delivery_address = Column(JSON, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    service_fee = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    tip = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(String(20), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")
    coupon_code = Column(String(50), nullable=True)
    special_instructions = Column(String(500), nullable=False, default="")

    preparation_time = Column(Integer, nullable=True)
    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)
    estimated_pickup_time = Column(DateTime(timezone=True), nullable=True)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)

    tracking_history = Column(JSON, nullable=False, default=list)
    cancellation = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    def can_cancel(self) -> bool:
        return self.status in CUSTOMER_CANCELLABLE

    def add_tracking(self, status: str, description: str, location: str) -> None:
        #JSON columns are not mutation-tracked, assign a new list
        self.tracking_history = list(self.tracking_history or []) + [
            {
                "status": status,
                "timestamp": utcnow().isoformat(),
                "description": description,
                "location": location,
            }
        ]
