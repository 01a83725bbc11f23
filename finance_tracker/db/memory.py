import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import uuid4

from finance_tracker.db.base import ExpenseStorage, filter_expenses
from finance_tracker.models.category import Category, CategoryCreate, CategoryUpdate
from finance_tracker.models.expense import (
    ExpenseCreate,
    ExpenseInDB,
    ExpenseRecord,
    ExpenseUpdate,
    ExpenseWithCategory,
)
from finance_tracker.models.user import UserInDB


class MemoryStorage(ExpenseStorage):
    """Dict-backed storage for local development and tests. Not persistent."""

    def __init__(self, seed_defaults: bool = True) -> None:
        self._lock = threading.Lock()
        self._categories: Dict[str, Category] = {}
        self._expenses: Dict[str, ExpenseInDB] = {}
        self._users: Dict[str, UserInDB] = {}
        if seed_defaults:
            self.ensure_default_categories()

    def _with_category(self, expense: ExpenseInDB) -> ExpenseWithCategory:
        return ExpenseWithCategory(
            **expense.model_dump(),
            category=self._categories.get(expense.category_id),
        )

    def list_categories(self) -> List[Category]:
        with self._lock:
            return sorted(self._categories.values(), key=lambda c: c.name)

    def get_category(self, category_id: str) -> Optional[Category]:
        with self._lock:
            return self._categories.get(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        with self._lock:
            return next((c for c in self._categories.values() if c.name == name), None)

    def create_category(self, data: CategoryCreate) -> Category:
        category = Category(id=str(uuid4()), **data.model_dump())
        with self._lock:
            self._categories[category.id] = category
        return category

    def update_category(self, category_id: str, data: CategoryUpdate) -> Optional[Category]:
        with self._lock:
            existing = self._categories.get(category_id)
            if existing is None:
                return None
            updated = existing.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
            self._categories[category_id] = updated
            return updated

    def delete_category(self, category_id: str) -> bool:
        with self._lock:
            return self._categories.pop(category_id, None) is not None

    def category_in_use(self, category_id: str) -> bool:
        with self._lock:
            return any(e.category_id == category_id for e in self._expenses.values())

    def list_expenses(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[str] = None,
    ) -> List[ExpenseWithCategory]:
        with self._lock:
            expenses = [self._with_category(e) for e in self._expenses.values()]
        return filter_expenses(expenses, start_date, end_date, category_id)

    def get_expense(self, expense_id: str) -> Optional[ExpenseWithCategory]:
        with self._lock:
            expense = self._expenses.get(expense_id)
            return self._with_category(expense) if expense else None

    def create_expense(self, data: ExpenseCreate) -> ExpenseWithCategory:
        expense = ExpenseInDB(**data.model_dump())
        with self._lock:
            self._expenses[expense.id] = expense
            return self._with_category(expense)

    def update_expense(self, expense_id: str, data: ExpenseUpdate) -> Optional[ExpenseWithCategory]:
        with self._lock:
            existing = self._expenses.get(expense_id)
            if existing is None:
                return None
            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            changes["updated_at"] = datetime.now(timezone.utc)
            updated = existing.model_copy(update=changes)
            self._expenses[expense_id] = updated
            return self._with_category(updated)

    def delete_expense(self, expense_id: str) -> bool:
        with self._lock:
            return self._expenses.pop(expense_id, None) is not None

    def list_expense_records(self) -> List[ExpenseRecord]:
        with self._lock:
            return [
                ExpenseRecord(
                    amount=e.amount,
                    date=e.date,
                    category_id=e.category_id,
                    category=self._categories.get(e.category_id),
                    description=e.description,
                )
                for e in self._expenses.values()
            ]

    def put_raw_expense(self, expense: ExpenseInDB) -> None:
        """Store an expense as-is, skipping request validation (imports, fixtures)."""
        with self._lock:
            self._expenses[expense.id] = expense

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        with self._lock:
            return next((u for u in self._users.values() if u.email.lower() == email.lower()), None)

    def get_user(self, user_id: str) -> Optional[UserInDB]:
        with self._lock:
            return self._users.get(user_id)

    def create_user(self, user: UserInDB) -> UserInDB:
        with self._lock:
            self._users[user.id] = user
        return user
