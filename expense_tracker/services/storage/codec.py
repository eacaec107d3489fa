"""
Expense collection codec.

The persisted blob is a JSON array of objects:

    [{"id": "<uuid>", "amount": "12.50", "category": "food",
      "date": "2024-01-05T00:00:00", "description": "Lunch", "notes": null}]

Amounts are written as decimal strings so they survive the round trip
exactly; plain JSON numbers are accepted when decoding.
"""

from typing import Iterable, Union

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from expense_tracker.models.expense import Expense
from expense_tracker.services.storage.interface import CorruptDataError, StorageError


_EXPENSE_LIST = TypeAdapter(list[Expense])


def encode_expenses(expenses: Iterable[Expense]) -> str:
    """Serialize the collection, preserving order."""
    try:
        return _EXPENSE_LIST.dump_json(list(expenses)).decode("utf-8")
    except PydanticSerializationError as e:
        raise StorageError(f"Failed to encode expenses: {e}") from e


def decode_expenses(blob: Union[str, bytes]) -> list[Expense]:
    """Parse a blob produced by encode_expenses."""
    try:
        return _EXPENSE_LIST.validate_json(blob)
    except ValidationError as e:
        raise CorruptDataError(
            f"Stored expenses could not be decoded ({e.error_count()} errors)"
        ) from e
