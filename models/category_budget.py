from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class CategoryBudget(BaseModel, Base):
    __tablename__ = "category_budgets"

    budget_id = Column(String(36), ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    remaining_amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(255), nullable=True)

    budget = relationship("Budget", back_populates="category_budgets")
    category = relationship("Category", back_populates="category_budgets")

    __table_args__ = (
        UniqueConstraint("budget_id", "category_id", name="uq_category_budgets_budget_category"),
        CheckConstraint("amount >= 0", name="ck_category_budgets_amount_nonnegative"),
        CheckConstraint("remaining_amount >= 0", name="ck_category_budgets_remaining_nonnegative"),
    )

    @property
    def category_name(self):
        return self.category.name if self.category else None
