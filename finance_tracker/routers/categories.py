import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from finance_tracker.db import ExpenseStorage, StorageError, get_storage
from finance_tracker.models.category import Category, CategoryCreate, CategoryUpdate
from finance_tracker.routers.auth import get_current_user_id

router = APIRouter(dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Category])
def list_categories(storage: ExpenseStorage = Depends(get_storage)):
    return storage.list_categories()


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, storage: ExpenseStorage = Depends(get_storage)):
    if storage.get_category_by_name(category.name):
        raise HTTPException(status_code=409, detail="Category name already exists")
    try:
        return storage.create_category(category)
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to create category")


@router.put("/{category_id}", response_model=Category)
def update_category(
    category_id: str,
    update: CategoryUpdate,
    storage: ExpenseStorage = Depends(get_storage),
):
    if update.name is not None:
        clash = storage.get_category_by_name(update.name)
        if clash and clash.id != category_id:
            raise HTTPException(status_code=409, detail="Category name already exists")

    updated = storage.update_category(category_id, update)
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: str, storage: ExpenseStorage = Depends(get_storage)):
    if storage.category_in_use(category_id):
        raise HTTPException(status_code=409, detail="Category is used by existing expenses")
    if not storage.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    logger.info(f"Deleted category {category_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
