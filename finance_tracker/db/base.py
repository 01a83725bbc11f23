import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from finance_tracker.models.category import DEFAULT_CATEGORIES, Category, CategoryCreate, CategoryUpdate
from finance_tracker.models.expense import ExpenseCreate, ExpenseRecord, ExpenseUpdate, ExpenseWithCategory
from finance_tracker.models.user import UserInDB
from finance_tracker.utils.dates import to_local

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a write cannot be persisted."""


class ExpenseStorage(ABC):
    """Persistence contract shared by the DynamoDB and in-memory backends."""

    # Categories
    @abstractmethod
    def list_categories(self) -> List[Category]: ...

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]: ...

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]: ...

    @abstractmethod
    def create_category(self, data: CategoryCreate) -> Category: ...

    @abstractmethod
    def update_category(self, category_id: str, data: CategoryUpdate) -> Optional[Category]: ...

    @abstractmethod
    def delete_category(self, category_id: str) -> bool: ...

    @abstractmethod
    def category_in_use(self, category_id: str) -> bool: ...

    # Expenses
    @abstractmethod
    def list_expenses(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[str] = None,
    ) -> List[ExpenseWithCategory]: ...

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[ExpenseWithCategory]: ...

    @abstractmethod
    def create_expense(self, data: ExpenseCreate) -> ExpenseWithCategory: ...

    @abstractmethod
    def update_expense(self, expense_id: str, data: ExpenseUpdate) -> Optional[ExpenseWithCategory]: ...

    @abstractmethod
    def delete_expense(self, expense_id: str) -> bool: ...

    @abstractmethod
    def list_expense_records(self) -> List[ExpenseRecord]:
        """Full snapshot of expenses with categories joined, for analytics."""

    # Users
    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserInDB]: ...

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserInDB]: ...

    @abstractmethod
    def create_user(self, user: UserInDB) -> UserInDB: ...

    def ensure_default_categories(self) -> bool:
        """Seed the default categories when none exist. Returns True if seeded."""
        try:
            if self.list_categories():
                return False
            for category in DEFAULT_CATEGORIES:
                self.create_category(category)
            logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
            return True
        except StorageError as e:
            logger.error(f"Failed to initialize default categories: {str(e)}")
            return False


def in_date_range(
    expense_date: datetime,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
) -> bool:
    """Inclusive range check tolerant of naive/aware mixes (naive means local)."""
    moment = to_local(expense_date)
    if start_date is not None and moment < to_local(start_date):
        return False
    if end_date is not None and moment > to_local(end_date):
        return False
    return True


def filter_expenses(
    expenses: List[ExpenseWithCategory],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category_id: Optional[str] = None,
) -> List[ExpenseWithCategory]:
    """Apply the list filters: a full date range wins over a category filter."""
    if start_date is not None and end_date is not None:
        expenses = [e for e in expenses if in_date_range(e.date, start_date, end_date)]
    elif category_id:
        expenses = [e for e in expenses if e.category_id == category_id]
    # newest first
    return sorted(expenses, key=lambda e: to_sort_key(e.date), reverse=True)


def to_sort_key(value: datetime) -> float:
    return to_local(value).timestamp()
