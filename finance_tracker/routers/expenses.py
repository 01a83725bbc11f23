from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from finance_tracker.db import ExpenseStorage, StorageError, get_storage
from finance_tracker.models.expense import ExpenseCreate, ExpenseUpdate, ExpenseWithCategory
from finance_tracker.routers.auth import get_current_user_id

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("", response_model=List[ExpenseWithCategory])
def list_expenses(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    storage: ExpenseStorage = Depends(get_storage),
):
    """
    Newest first. Both ``startDate`` and ``endDate`` (inclusive) filter by date;
    otherwise ``categoryId`` filters by category.
    """
    return storage.list_expenses(start_date=start_date, end_date=end_date, category_id=category_id)


@router.get("/{expense_id}", response_model=ExpenseWithCategory)
def get_expense(expense_id: str, storage: ExpenseStorage = Depends(get_storage)):
    expense = storage.get_expense(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


@router.post("", response_model=ExpenseWithCategory, status_code=status.HTTP_201_CREATED)
def create_expense(expense: ExpenseCreate, storage: ExpenseStorage = Depends(get_storage)):
    if not storage.get_category(expense.category_id):
        raise HTTPException(status_code=400, detail="Category not found")
    try:
        return storage.create_expense(expense)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to save expense")


@router.patch("/{expense_id}", response_model=ExpenseWithCategory)
def update_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    storage: ExpenseStorage = Depends(get_storage),
):
    if not expense_update.model_dump(exclude_unset=True, exclude_none=True):
        raise HTTPException(status_code=400, detail="No fields to update")
    if expense_update.category_id and not storage.get_category(expense_update.category_id):
        raise HTTPException(status_code=400, detail="Category not found")

    updated = storage.update_expense(expense_id, expense_update)
    if not updated:
        raise HTTPException(status_code=404, detail="Expense not found")
    return updated


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, storage: ExpenseStorage = Depends(get_storage)):
    if not storage.delete_expense(expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
