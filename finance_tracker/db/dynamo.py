import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from finance_tracker.core.config import settings
from finance_tracker.db.base import ExpenseStorage, StorageError, filter_expenses
from finance_tracker.models.category import Category, CategoryCreate, CategoryUpdate
from finance_tracker.models.expense import (
    ExpenseCreate,
    ExpenseInDB,
    ExpenseRecord,
    ExpenseUpdate,
    ExpenseWithCategory,
)
from finance_tracker.models.user import UserInDB
from finance_tracker.utils.dates import parse_iso

logger = logging.getLogger(__name__)


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def _is_conditional_failure(e: ClientError) -> bool:
    return e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _category_from_item(item: Dict[str, Any]) -> Category:
    return Category(id=item["category_id"], name=item["name"], color=item["color"], icon=item["icon"])


def _expense_to_item(expense: ExpenseInDB) -> Dict[str, Any]:
    """Amounts stay strings so no precision is lost to DynamoDB numbers."""
    return {
        "expense_id": expense.id,
        "amount": expense.amount,
        "description": expense.description,
        "category_id": expense.category_id,
        "date": expense.date.isoformat(),
        "created_at": expense.created_at.isoformat(),
        "updated_at": expense.updated_at.isoformat(),
    }


def _expense_from_item(item: Dict[str, Any]) -> ExpenseInDB:
    return ExpenseInDB(
        id=item["expense_id"],
        amount=str(item.get("amount", "")),
        description=item.get("description", ""),
        category_id=item["category_id"],
        date=parse_iso(item["date"]),
        created_at=parse_iso(item["created_at"]),
        updated_at=parse_iso(item["updated_at"]),
    )


def _user_from_item(item: Dict[str, Any]) -> UserInDB:
    fields = {
        "id": item["user_id"],
        "email": item["email"],
        "name": item.get("name", ""),
        "password_hash": item["password_hash"],
    }
    if item.get("created_at"):
        fields["created_at"] = parse_iso(item["created_at"])
    return UserInDB(**fields)


class DynamoStorage(ExpenseStorage):
    """
    DynamoDB-backed storage with one table per relation:

    - users (PK ``user_id``, GSI ``email-index`` on ``email``)
    - categories (PK ``category_id``)
    - expenses (PK ``expense_id``)
    """

    def __init__(self, dynamodb=None) -> None:
        if dynamodb is None:
            dynamodb = boto3.resource("dynamodb", region_name=settings.DYNAMO_REGION)
        self.users_table = dynamodb.Table(settings.DYNAMO_USERS_TABLE)
        self.categories_table = dynamodb.Table(settings.DYNAMO_CATEGORIES_TABLE)
        self.expenses_table = dynamodb.Table(settings.DYNAMO_EXPENSES_TABLE)

    @staticmethod
    def _scan(table, **kwargs) -> Iterator[Dict[str, Any]]:
        """Scan every page of a table."""
        while True:
            response = table.scan(**kwargs)
            yield from response.get("Items", [])
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    @staticmethod
    def _update_expression(updates: Dict[str, Any]) -> Dict[str, Any]:
        parts = []
        names = {}
        values = {}
        for idx, (key, value) in enumerate(updates.items()):
            names[f"#f{idx}"] = key
            values[f":v{idx}"] = value
            parts.append(f"#f{idx} = :v{idx}")
        return {
            "UpdateExpression": "SET " + ", ".join(parts),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
        }

    # Categories

    def _category_map(self) -> Dict[str, Category]:
        return {item["category_id"]: _category_from_item(item) for item in self._scan(self.categories_table)}

    def list_categories(self) -> List[Category]:
        try:
            return sorted(self._category_map().values(), key=lambda c: c.name)
        except ClientError as e:
            logger.error(f"list_categories failed: {_error_message(e)}")
            return []

    def get_category(self, category_id: str) -> Optional[Category]:
        try:
            item = self.categories_table.get_item(Key={"category_id": category_id}).get("Item")
            return _category_from_item(item) if item else None
        except ClientError as e:
            logger.error(f"get_category failed: {_error_message(e)}")
            return None

    def get_category_by_name(self, name: str) -> Optional[Category]:
        try:
            items = list(self._scan(self.categories_table, FilterExpression=Attr("name").eq(name)))
            return _category_from_item(items[0]) if items else None
        except ClientError as e:
            logger.error(f"get_category_by_name failed: {_error_message(e)}")
            return None

    def create_category(self, data: CategoryCreate) -> Category:
        category = Category(id=str(uuid4()), **data.model_dump())
        try:
            self.categories_table.put_item(
                Item={"category_id": category.id, "name": category.name, "color": category.color, "icon": category.icon}
            )
        except ClientError as e:
            logger.error(f"create_category failed: {_error_message(e)}")
            raise StorageError("Failed to save category") from e
        return category

    def update_category(self, category_id: str, data: CategoryUpdate) -> Optional[Category]:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if not updates:
            return self.get_category(category_id)
        try:
            response = self.categories_table.update_item(
                Key={"category_id": category_id},
                ConditionExpression=Attr("category_id").exists(),
                ReturnValues="ALL_NEW",
                **self._update_expression(updates),
            )
        except ClientError as e:
            if not _is_conditional_failure(e):
                logger.error(f"update_category failed: {_error_message(e)}")
            return None
        attributes = response.get("Attributes")
        return _category_from_item(attributes) if attributes else None

    def delete_category(self, category_id: str) -> bool:
        try:
            response = self.categories_table.delete_item(
                Key={"category_id": category_id},
                ReturnValues="ALL_OLD",
            )
            return "Attributes" in response
        except ClientError as e:
            logger.error(f"delete_category failed: {_error_message(e)}")
            return False

    def category_in_use(self, category_id: str) -> bool:
        # a filtered scan page can come back empty while a later page matches
        matches = self._scan(
            self.expenses_table,
            FilterExpression=Attr("category_id").eq(category_id),
            ProjectionExpression="expense_id",
        )
        try:
            return next(matches, None) is not None
        except ClientError as e:
            logger.error(f"category_in_use failed: {_error_message(e)}")
            # refuse deletion when we cannot tell
            return True

    # Expenses

    def _stored_expenses(self) -> Iterator[ExpenseInDB]:
        """Scan the expenses table, dropping rows that cannot be read back."""
        for item in self._scan(self.expenses_table):
            try:
                yield _expense_from_item(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed expense row {item.get('expense_id')}: {e!r}")

    def _joined(self) -> List[ExpenseWithCategory]:
        categories = self._category_map()
        return [
            ExpenseWithCategory(**expense.model_dump(), category=categories.get(expense.category_id))
            for expense in self._stored_expenses()
        ]

    def list_expenses(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        category_id: Optional[str] = None,
    ) -> List[ExpenseWithCategory]:
        try:
            return filter_expenses(self._joined(), start_date, end_date, category_id)
        except ClientError as e:
            logger.error(f"list_expenses failed: {_error_message(e)}")
            return []

    def get_expense(self, expense_id: str) -> Optional[ExpenseWithCategory]:
        try:
            item = self.expenses_table.get_item(Key={"expense_id": expense_id}).get("Item")
            if not item:
                return None
            expense = _expense_from_item(item)
            return ExpenseWithCategory(**expense.model_dump(), category=self.get_category(expense.category_id))
        except ClientError as e:
            logger.error(f"get_expense failed: {_error_message(e)}")
            return None

    def create_expense(self, data: ExpenseCreate) -> ExpenseWithCategory:
        expense = ExpenseInDB(**data.model_dump())
        try:
            self.expenses_table.put_item(Item=_expense_to_item(expense))
        except ClientError as e:
            logger.error(f"create_expense failed: {_error_message(e)}")
            raise StorageError("Failed to save expense") from e
        return ExpenseWithCategory(**expense.model_dump(), category=self.get_category(expense.category_id))

    def update_expense(self, expense_id: str, data: ExpenseUpdate) -> Optional[ExpenseWithCategory]:
        updates: Dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if "date" in updates:
            updates["date"] = updates["date"].isoformat()
        updates["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            response = self.expenses_table.update_item(
                Key={"expense_id": expense_id},
                ConditionExpression=Attr("expense_id").exists(),
                ReturnValues="ALL_NEW",
                **self._update_expression(updates),
            )
        except ClientError as e:
            if not _is_conditional_failure(e):
                logger.error(f"update_expense failed: {_error_message(e)}")
            return None
        attributes = response.get("Attributes")
        if not attributes:
            return None
        expense = _expense_from_item(attributes)
        return ExpenseWithCategory(**expense.model_dump(), category=self.get_category(expense.category_id))

    def delete_expense(self, expense_id: str) -> bool:
        try:
            response = self.expenses_table.delete_item(
                Key={"expense_id": expense_id},
                ReturnValues="ALL_OLD",
            )
            return "Attributes" in response
        except ClientError as e:
            logger.error(f"delete_expense failed: {_error_message(e)}")
            return False

    def list_expense_records(self) -> List[ExpenseRecord]:
        records = []
        try:
            categories = self._category_map()
            for item in self._scan(self.expenses_table):
                # amounts are left raw for the analyzer; a row without a usable date or category id is dropped
                try:
                    records.append(
                        ExpenseRecord(
                            amount=str(item.get("amount", "")),
                            date=parse_iso(item["date"]),
                            category_id=item["category_id"],
                            category=categories.get(item["category_id"]),
                            description=item.get("description", ""),
                        )
                    )
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"Skipping malformed expense row {item.get('expense_id')}: {e!r}")
        except ClientError as e:
            logger.error(f"list_expense_records failed: {_error_message(e)}")
            return []
        return records

    # Users

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        """Query the users table by email through the ``email-index`` GSI."""
        try:
            response = self.users_table.query(
                IndexName="email-index",
                KeyConditionExpression=Key("email").eq(email.lower()),
            )
            items = response.get("Items", [])
            return _user_from_item(items[0]) if items else None
        except ClientError as e:
            logger.error(f"get_user_by_email failed: {_error_message(e)}")
            return None

    def get_user(self, user_id: str) -> Optional[UserInDB]:
        try:
            item = self.users_table.get_item(Key={"user_id": user_id}).get("Item")
            return _user_from_item(item) if item else None
        except ClientError as e:
            logger.error(f"get_user failed: {_error_message(e)}")
            return None

    def create_user(self, user: UserInDB) -> UserInDB:
        try:
            self.users_table.put_item(
                Item={
                    "user_id": user.id,
                    "email": user.email.lower(),
                    "name": user.name,
                    "password_hash": user.password_hash,
                    "created_at": user.created_at.isoformat(),
                }
            )
        except ClientError as e:
            logger.error(f"create_user failed: {_error_message(e)}")
            raise StorageError("Failed to save user") from e
        return user
