"""Append-only JSONL sink for extracted product records.

Each record is written as one complete line and flushed to disk before the
next append, so a crash loses only the products still in flight.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import IO, Optional

from loguru import logger

from catalog_scraper.models import ProductRecord


class JsonlRecordSink:
    """Durable, concurrency-safe appender of ProductRecord lines."""

    def __init__(self, file_path: str | Path):
        self.path = Path(file_path)
        self._file: Optional[IO[str]] = None
        self._lock = asyncio.Lock()
        self.records_written = 0

    def open(self) -> "JsonlRecordSink":
        """Open the sink in append mode.

        Raises:
            OSError: If the file cannot be opened for appending
        """
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
            logger.info(f"Appending records to {self.path}")
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    async def append(self, record: ProductRecord) -> None:
        """Persist one record as a single line."""
        if self._file is None:
            raise RuntimeError(f"Sink {self.path} is not open")

        line = json.dumps(record.to_dict(), ensure_ascii=False) + "\n"
        async with self._lock:
            # fsync blocks, so the write runs in a worker thread
            await asyncio.to_thread(self._write_line, line)
            self.records_written += 1

    def _write_line(self, line: str) -> None:
        self._file.write(line)
        self._file.flush()
        os.fsync(self._file.fileno())

    def __enter__(self) -> "JsonlRecordSink":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
