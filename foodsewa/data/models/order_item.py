from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, JSON
from sqlalchemy.orm import relationship

from foodsewa.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    menu_item_id = Column(String(64), nullable=False)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    special_instructions = Column(String(200), nullable=False, default="")
    customizations = Column(JSON, nullable=False, default=list)

    order = relationship("OrderModel", back_populates="items")
