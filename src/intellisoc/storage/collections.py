"""Typed record collections on top of a DurableStore.

Records are validated against their pydantic model whenever they cross the
store boundary: on the way in (``append``/``update``) a bad record aborts the
write, on the way out a bad record is skipped with a warning. Records that
fail validation are never dropped from the file; writes carry them through
as stored.
"""

from typing import Any, Callable, Generic, Iterable, List, Optional, Tuple, Type, TypeVar
import logging

from pydantic import BaseModel, ValidationError as PydanticValidationError

from intellisoc.storage.store import DurableStore, Record


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class RecordCollection(Generic[T]):
    """A named collection whose records are instances of ``model``.

    ``id_field`` names the integer sequence field, if the records have one.
    """

    def __init__(
        self,
        store: DurableStore,
        name: str,
        model: Type[T],
        id_field: Optional[str] = None,
    ):
        self.store = store
        self.name = name
        self.model = model
        self.id_field = id_field

    def _split(self, raw: List[Record]) -> Tuple[List[T], List[Tuple[int, Record]]]:
        """Valid records, plus ``(position, raw)`` for the ones that failed."""
        records: List[T] = []
        rejected: List[Tuple[int, Record]] = []
        for position, item in enumerate(raw):
            try:
                records.append(self.model.model_validate(item))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipped malformed {self.name} record at position {position}: "
                    f"{e.error_count()} validation error(s)"
                )
                rejected.append((position, item))
        return records, rejected

    def _parse(self, raw: List[Record]) -> List[T]:
        return self._split(raw)[0]

    def _dump(self, records: List[T]) -> List[Record]:
        return [record.model_dump(mode="json") for record in records]

    def _next_id(self, raw: List[Record]) -> int:
        if self.id_field is None:
            return len(raw) + 1
        return next_sequence(raw, self.id_field)

    def all(self) -> List[T]:
        """All valid records in insertion order."""
        return self._parse(self.store.load(self.name))

    def update(self, fn: Callable[[List[T]], List[T]]) -> List[T]:
        """Typed read-modify-write under the store's collection lock.

        ``fn`` sees only the valid records. Records that failed validation
        are written back unchanged at their original positions.
        """
        result: List[T] = []

        def apply(raw: List[Record]) -> List[Record]:
            nonlocal result
            records, rejected = self._split(raw)
            result = list(fn(records))
            merged = self._dump(result)
            for position, item in rejected:
                merged.insert(min(position, len(merged)), item)
            return merged

        self.store.update(self.name, apply)
        return result

    def append_many(self, build: Callable[[int], List[T]]) -> List[T]:
        """Append the records ``build`` returns for the next sequence number.

        The next number is ``max(id_field) + 1`` over every stored record,
        including ones that fail validation, so ids are never handed out
        twice. Existing raw records are written back untouched. Returns only
        the newly appended records.
        """
        appended: List[T] = []

        def apply(raw: List[Record]) -> List[Record]:
            nonlocal appended
            appended = [
                self.model.model_validate(record)
                for record in build(self._next_id(raw))
            ]
            return raw + self._dump(appended)

        self.store.update(self.name, apply)
        return appended

    def append(self, build: Callable[[int], T]) -> T:
        """Append the single record ``build`` returns for the next sequence number."""
        return self.append_many(lambda next_id: [build(next_id)])[0]

    def find_last(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """Most recently appended record matching ``predicate``."""
        for record in reversed(self.all()):
            if predicate(record):
                return record
        return None


def _sequence_value(record: Any, field: str) -> Optional[int]:
    value = record.get(field) if isinstance(record, dict) else getattr(record, field, None)
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def next_sequence(records: Iterable[Any], field: str) -> int:
    """``max(existing ids) + 1``, or 1 for an empty collection.

    Accepts models or raw dicts; values that are not integers are ignored.
    """
    values = (_sequence_value(record, field) for record in records)
    return max((value for value in values if value is not None), default=0) + 1
