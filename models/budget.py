from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Budget(BaseModel, Base):
    __tablename__ = "budgets"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    total_budget = Column(Numeric(12, 2), nullable=False)

    category_budgets = relationship(
        "CategoryBudget",
        back_populates="budget",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_budgets_user_month_year"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_budgets_month_range"),
        CheckConstraint("year >= 2000", name="ck_budgets_year_min"),
        CheckConstraint("total_budget >= 0", name="ck_budgets_total_nonnegative"),
    )
