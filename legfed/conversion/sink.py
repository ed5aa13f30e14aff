"""
Sinks and the end-of-run flush.

A sink hands finished Items to a persistence layer. SinkAdapter walks
the registry once at the end of a run and stores every Item exactly
once, storing the Items an Item references before the Item itself.
Reference cycles (a Location and its feature reference each other) are
broken by storing the Item reached first; the store is expected to
accept a forward reference in that case.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Optional, TextIO

from sqlalchemy.orm import Session

from legfed.conversion.errors import FlushError, PersistenceError
from legfed.conversion.registry import EntityRegistry
from legfed.models.item import Item
from legfed.models.stored_item import StoredItem

logger = logging.getLogger(__name__)


class Sink:
    """Persistence interface used by SinkAdapter."""

    def store(self, item: Item) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemorySink(Sink):
    """Keeps stored Items in a list, in store order."""

    def __init__(self):
        self.items: list[Item] = []

    def store(self, item: Item) -> None:
        self.items.append(item)

    def by_class(self, class_name: str) -> list[Item]:
        return [item for item in self.items if item.class_name == class_name]

    def position(self, item: Item) -> int:
        for i, stored in enumerate(self.items):
            if stored is item:
                return i
        raise ValueError(f"{item!r} was not stored")


class JsonLinesSink(Sink):
    """Writes one JSON object per Item."""

    def __init__(self, output: Path | TextIO):
        if isinstance(output, (str, Path)):
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(path, "w", encoding="utf-8")
            self._owns_fh = True
        else:
            self._fh = output
            self._owns_fh = False
        self.count = 0

    def store(self, item: Item) -> None:
        self._fh.write(json.dumps(item.to_dict(), sort_keys=True))
        self._fh.write("\n")
        self.count += 1

    def close(self) -> None:
        if self._owns_fh:
            self._fh.close()
        else:
            self._fh.flush()


class DatabaseSink(Sink):
    """
    Stores Items as rows of the legfed_item table.

    Rows are added to the session as they are stored and committed on
    close; a failure rolls the whole run back.
    """

    def __init__(self, session: Session, run_id: Optional[str] = None):
        self.session = session
        self.run_id = run_id or uuid.uuid4().hex
        self.count = 0

    def store(self, item: Item) -> None:
        data = item.to_dict()
        self.session.add(
            StoredItem(
                run_id=self.run_id,
                identifier=data["identifier"],
                class_name=data["class"],
                attributes=data["attributes"],
                references=data["references"],
                collections=data["collections"],
            )
        )
        self.count += 1

    def close(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(f"Committed {self.count} items for run {self.run_id}")


class SinkAdapter:
    """Flushes a registry to a sink, once."""

    def __init__(self, registry: EntityRegistry, sink: Sink):
        self.registry = registry
        self.sink = sink
        self._flushed = False
        self._stored: set[int] = set()
        self._visiting: set[int] = set()

    def flush_all(self) -> int:
        """
        Store every registry Item exactly once.

        Returns:
            Number of Items stored

        Raises:
            FlushError: called a second time
            PersistenceError: the sink failed; the run is aborted
        """
        if self._flushed:
            raise FlushError("flush_all() may only be called once per run")
        self._flushed = True

        for kind in self.registry.kinds():
            before = len(self._stored)
            for item in self.registry.all(kind):
                self._store(item)
            logger.info(
                f"Stored {self.registry.count(kind)} {kind} items "
                f"({len(self._stored) - before} in this pass)"
            )

        try:
            self.sink.close()
        except Exception as e:
            raise PersistenceError(f"Closing sink failed: {e}") from e
        return len(self._stored)

    def _store(self, item: Item) -> None:
        key = id(item)
        if key in self._stored or key in self._visiting:
            return
        self._visiting.add(key)
        for referenced in item.iter_references():
            self._store(referenced)
        self._visiting.discard(key)
        try:
            self.sink.store(item)
        except Exception as e:
            raise PersistenceError(f"Storing {item!r} failed: {e}") from e
        self._stored.add(key)
