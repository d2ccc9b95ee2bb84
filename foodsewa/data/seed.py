# foodsewa/data/seed.py
from datetime import timedelta
from decimal import Decimal

from foodsewa.data.database import Base, SessionLocal, engine
from foodsewa.data.models import DiscountModel
from foodsewa.domain.enums import CustomerSegment, DiscountType, UserRole
from foodsewa.repos.discount_repo import DiscountRepo
from foodsewa.services.user_service import UserService, issue_token
from foodsewa.utils.logging import get_logger
from foodsewa.utils.timeutil import utcnow

logger = get_logger(__name__)


def seed():
    """Dev data matching the mock restaurant service (r1 owned by user 2, r2 by user 3)."""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        users = UserService(db)
        users.create_user(1, "Demo Customer", "customer@foodsewa.test")
        users.create_user(2, "Momo Corner", "owner@momocorner.test", UserRole.RESTAURANT)
        users.create_user(3, "Dal Bhat House", "owner@dalbhat.test", UserRole.RESTAURANT)

        discounts = DiscountRepo(db)
        if not discounts.get_active_by_code("WELCOME10", "r1"):
            now = utcnow()
            discounts.add(
                DiscountModel(
                    restaurant_id="r1",
                    name="Welcome 10",
                    description="10% off your first momo order",
                    type=DiscountType.PERCENTAGE.value,
                    value=Decimal("10"),
                    code="WELCOME10",
                    max_discount=Decimal("5.00"),
                    customer_segment=CustomerSegment.NEW.value,
                    start_date=now,
                    end_date=now + timedelta(days=90),
                )
            )
            logger.info("Seeded discount WELCOME10")

        print(f"customer token: {issue_token(1)}")
        print(f"restaurant token: {issue_token(2)}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
