# foodsewa/repos/order_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from foodsewa.data.models import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def add(self, order: OrderModel) -> None:
        self.db.add(order)

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.execute(
            select(OrderModel.id).where(OrderModel.order_number == order_number)
        ).first() is not None

    def list_for_customer(
        self,
        customer_id: int,
        statuses: list[str],
        sort_column,
        descending: bool,
        offset: int,
        limit: int,
    ) -> tuple[list[OrderModel], int]:
        conditions = [OrderModel.customer_id == customer_id]
        if statuses:
            conditions.append(OrderModel.status.in_(statuses))

        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*conditions)
        ).scalar_one()

        order = sort_column.desc() if descending else sort_column.asc()
        rows = self.db.execute(
            select(OrderModel).where(*conditions).order_by(order).offset(offset).limit(limit)
        ).scalars().all()
        return rows, total

    def customer_stats(self, customer_id: int) -> dict:
        totals = self.db.execute(
            select(
                func.count(OrderModel.id),
                func.coalesce(func.sum(OrderModel.total), 0),
                func.coalesce(func.avg(OrderModel.total), 0),
            ).where(OrderModel.customer_id == customer_id)
        ).one()

        by_status = self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id))
            .where(OrderModel.customer_id == customer_id)
            .group_by(OrderModel.status)
        ).all()

        return {
            "total_orders": totals[0],
            "total_spent": totals[1],
            "avg_order_value": totals[2],
            "status_counts": dict(by_status),
        }

    def count_delivered(self, customer_id: int) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(
                OrderModel.customer_id == customer_id,
                OrderModel.status == "delivered",
            )
        ).scalar_one()

    def count_coupon_uses(self, customer_id: int, coupon_code: str, statuses: list[str]) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(
                OrderModel.customer_id == customer_id,
                OrderModel.coupon_code == coupon_code,
                OrderModel.status.in_(statuses),
            )
        ).scalar_one()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
