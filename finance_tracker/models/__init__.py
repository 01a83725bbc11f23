from finance_tracker.models.category import DEFAULT_CATEGORIES, Category, CategoryCreate, CategoryUpdate
from finance_tracker.models.expense import (
    ExpenseCreate,
    ExpenseInDB,
    ExpenseRecord,
    ExpenseUpdate,
    ExpenseWithCategory,
)
from finance_tracker.models.user import UserCreate, UserInDB, UserLogin, UserPublic

__all__ = [
    "DEFAULT_CATEGORIES",
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "ExpenseCreate",
    "ExpenseInDB",
    "ExpenseRecord",
    "ExpenseUpdate",
    "ExpenseWithCategory",
    "UserCreate",
    "UserInDB",
    "UserLogin",
    "UserPublic",
]
