"""
Realtime projector - keeps a local list of records in step with a change feed

Typical use on the consuming side:

    bookings = Projector(initial_rows, scope=lambda b: b["userId"] == user_id)
    for event in feed:
        visible = bookings.apply(event)

The feed is a global table feed, so the scope predicate is applied again
after every mutation. The internal list keeps every record the projector
has seen; only ``view()`` is filtered.
"""

from typing import Any, Callable, Iterable, Optional, Union

from .events import ChangeEvent

Record = dict[str, Any]


class Projector:
    """Applies insert/update/delete events to an ordered, id-keyed record list"""

    def __init__(
        self,
        records: Iterable[Record] = (),
        key: str = "id",
        scope: Optional[Callable[[Record], bool]] = None,
    ):
        self._key = key
        self._scope = scope
        self._records: list[Record] = []
        seen = set()
        # Initial fetch order is kept as-is; duplicates after the first are ignored
        for record in records:
            record_id = record.get(key)
            if record_id in seen:
                continue
            seen.add(record_id)
            self._records.append(dict(record))

    @property
    def records(self) -> list[Record]:
        """Unfiltered internal state"""
        return list(self._records)

    def view(self) -> list[Record]:
        if self._scope is None:
            return list(self._records)
        return [record for record in self._records if self._scope(record)]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: Any) -> bool:
        return self._index_of(record_id) is not None

    def apply(self, event: Union[ChangeEvent, Record]) -> list[Record]:
        """Apply one change event and return the re-filtered view"""
        if isinstance(event, dict):
            event = ChangeEvent.model_validate(event)

        record = event.record
        record_id = record.get(self._key)
        index = self._index_of(record_id)

        if event.type == "insert":
            if index is None:
                self._records.insert(0, dict(record))
        elif event.type == "update":
            if index is not None:
                self._records[index] = dict(record)
        elif event.type == "delete":
            if index is not None:
                del self._records[index]

        return self.view()

    def _index_of(self, record_id: Any) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.get(self._key) == record_id:
                return index
        return None
