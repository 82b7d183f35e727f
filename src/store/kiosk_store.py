"""Kiosk document store with serialized atomic writes."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from .exceptions import CorruptStoreError, SerializationError, StoreIOError

Document = Dict[str, Any]


def default_document() -> Document:
    """Build the document seeded when no data file exists."""
    return {
        "globalSettings": {
            "theme": "default",
            "titleFontSize": 48,
            "descriptionFontSize": 24,
            "watermark": {
                "enabled": False,
                "position": "bottom-right",
                "size": 100,
                "opacity": 50,
                "image": "",
            },
        },
        "slides": [],
    }


class KioskStore:
    """Owns the persisted kiosk document.

    Reads go straight to disk. Writes are chained onto a single in-process
    tail so that atomic replacements land in call order, one at a time.
    The queue lives in this object, so only one process may own a data file.
    """

    def __init__(self, data_path: str = "kiosk.json"):
        """Initialize kiosk store."""
        self.data_path = Path(data_path)
        self.data_dir = self.data_path.parent
        self.logger = logging.getLogger(__name__)

        # Last queued operation; every new write waits on it
        self._tail: Optional[asyncio.Future] = None

    @property
    def path(self) -> Path:
        """Path of the persisted document."""
        return self.data_path

    def exists(self) -> bool:
        """Check whether the document has been persisted."""
        return self.data_path.is_file()

    async def read(self) -> Document:
        """Load the current document, seeding defaults if it is absent."""
        try:
            return await asyncio.to_thread(self._load)
        except FileNotFoundError:
            self.logger.info(f"Kiosk data not found at {self.data_path}, creating defaults")
            return await self._enqueue(self._seed)
        except CorruptStoreError as e:
            self.logger.error(f"Refusing to load kiosk data: {e}")
            raise

    def write(self, document: Document) -> Awaitable[None]:
        """Queue a full-document replacement.

        The document is serialized immediately, so a value that cannot be
        encoded raises SerializationError before anything is queued. The
        returned awaitable resolves once this write has landed on disk and
        should be awaited to learn whether it did. A failure nobody awaits is
        still logged, never reported as an unretrieved exception. Must be
        called from a running event loop.
        """
        payload = self._serialize(document)
        return self._enqueue(lambda: asyncio.to_thread(self._replace, payload))

    async def update(self, mutator: Callable[[Document], Optional[Document]]) -> Document:
        """Run read, mutate and write as one queued transaction.

        The mutator receives the current document and either edits it in
        place or returns a replacement. Raising from the mutator aborts the
        transaction without writing.
        """
        async def transaction() -> Document:
            try:
                document = await asyncio.to_thread(self._load)
            except FileNotFoundError:
                document = default_document()

            result = mutator(document)
            if result is not None:
                document = result

            payload = self._serialize(document)
            await asyncio.to_thread(self._replace, payload)
            return document

        return await self._enqueue(transaction)

    def _enqueue(self, operation: Callable[[], Awaitable[Any]]) -> "asyncio.Future[Any]":
        """Chain an operation onto the write queue."""
        previous = self._tail
        task = asyncio.ensure_future(self._run_after(previous, operation))
        self._tail = task

        # Callers may give up waiting, the queued write still completes
        waiter = asyncio.shield(task)
        waiter.add_done_callback(self._mark_retrieved)
        return waiter

    @staticmethod
    def _mark_retrieved(waiter: asyncio.Future) -> None:
        """Consume the outcome so unawaited failures do not warn at shutdown."""
        if not waiter.cancelled():
            waiter.exception()

    async def _run_after(self, previous: Optional[asyncio.Future],
                         operation: Callable[[], Awaitable[Any]]) -> Any:
        """Wait for the previous operation to settle, then run this one."""
        if previous is not None and not previous.done():
            # wait() never raises the previous outcome, that belongs to its caller
            await asyncio.wait([previous])
        return await operation()

    async def _seed(self) -> Document:
        """Persist the default document unless a queued write created one."""
        try:
            return await asyncio.to_thread(self._load)
        except FileNotFoundError:
            document = default_document()
            await asyncio.to_thread(self._replace, self._serialize(document))
            self.logger.info(f"Seeded kiosk data at {self.data_path}")
            return document

    def _serialize(self, document: Document) -> str:
        """Encode a document as JSON text."""
        try:
            return json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            self.logger.error(f"Invalid document provided to kiosk store: {e}")
            raise SerializationError(f"Document cannot be serialized: {e}") from e

    def _load(self) -> Document:
        """Read and parse the data file. FileNotFoundError passes through."""
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise StoreIOError(f"Failed to read {self.data_path}: {e}", e) from e
        except UnicodeDecodeError as e:
            raise CorruptStoreError(f"Invalid UTF-8 in {self.data_path}: {e}", str(self.data_path)) from e

        try:
            document = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # Nesting too deep to parse raises RecursionError
            raise CorruptStoreError(f"Invalid JSON in {self.data_path}: {e}", str(self.data_path)) from e

        if not isinstance(document, dict):
            raise CorruptStoreError(
                f"Expected a JSON object in {self.data_path}, found {type(document).__name__}",
                str(self.data_path)
            )

        return document

    def _replace(self, payload: str) -> None:
        """Write payload to a temp file and atomically move it into place."""
        temp_path: Optional[Path] = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)

            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self.data_path.name}.",
                suffix=".tmp",
                dir=str(self.data_dir)
            )
            temp_path = Path(temp_name)

            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())

            os.chmod(temp_path, 0o644)

            # Atomic move
            os.replace(temp_path, self.data_path)
            temp_path = None

        except OSError as e:
            self.logger.error(f"Failed to write kiosk data atomically: {e}")
            raise StoreIOError(f"Failed to write {self.data_path}: {e}", e) from e

        finally:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
