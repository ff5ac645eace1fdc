"""
Streams a store file line by line and reconstructs its records.

Records are recognised with a small line grammar: exact begin/end marker
lines, NAME:/SIZE: header lines, and payload lines tagged DATA: (Standard,
wrapped over several lines) or [HEX] (Quantum). A record's dialect is
settled by the first payload tag it carries.
"""

import asyncio
import logging
import os
from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from catch_cli.cli.progress_manager import TransferTask
from catch_cli.exceptions import RecordNotFoundError, StoreIOError
from catch_cli.models.record import BEGIN_MARKERS, END_MARKERS, Dialect, Record
from catch_cli.storage.codec import decode_hex

log = logging.getLogger(__name__)

WRITE_CHUNK_SIZE = 65536


class _State(Enum):
    OUTSIDE = "outside"
    IN_HEADER = "in_header"
    IN_PAYLOAD = "in_payload"


class RecordParser:
    """
    Incremental parser fed one line at a time.

    `feed` returns a completed Record when the line closes one, else None.
    A record that is still open when the input ends is never returned.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.state = _State.OUTSIDE
        self.line_number = 0
        self._reset(None)

    def _reset(self, marker_dialect: Dialect | None) -> None:
        self._marker_dialect = marker_dialect
        self._dialect: Dialect | None = None
        self._name = ""
        self._size: int | None = None
        self._collected = bytearray()
        self._start_line = self.line_number

    @property
    def inside_record(self) -> bool:
        return self.state is not _State.OUTSIDE

    @property
    def pending_name(self) -> str:
        return self._name

    def feed(self, line: str) -> Record | None:
        self.line_number += 1
        line = line.rstrip("\r\n")
        marker = line.strip()

        if marker in BEGIN_MARKERS:
            if self.inside_record:
                log.warning(
                    f"Record '{self._name}' starting at line {self._start_line} "
                    f"has no end marker; dropping it"
                )
            self._reset(BEGIN_MARKERS[marker])
            self.state = _State.IN_HEADER
            return None

        if not self.inside_record:
            return None

        if marker in END_MARKERS:
            record = Record(
                name=self._name,
                payload=bytes(self._collected),
                dialect=self._dialect or self._marker_dialect,
                size=self._size,
            )
            self.state = _State.OUTSIDE
            return record

        if line.startswith("NAME:"):
            self._name = line.split(":", 1)[1]
        elif line.startswith("SIZE:"):
            self._parse_size(line[len("SIZE:") :])
        elif line.startswith("DATA:"):
            self._take_payload(Dialect.STANDARD, line[len("DATA:") :])
        elif line.startswith("[HEX]"):
            self._take_payload(Dialect.QUANTUM, line[len("[HEX]") :])
        elif line.startswith(("[DEC]", "[OCT]")):
            pass
        elif self.state is _State.IN_PAYLOAD and self._dialect is Dialect.STANDARD:
            # Wrapped continuation of the DATA: run
            self._collected += decode_hex(line, strict=self.strict)
        return None

    def _parse_size(self, text: str) -> None:
        try:
            self._size = int(text.strip())
        except ValueError:
            log.warning(f"Ignoring unreadable SIZE at line {self.line_number}: {text!r}")
            self._size = None

    def _take_payload(self, dialect: Dialect, text: str) -> None:
        if self._dialect is None:
            self._dialect = dialect
        elif self._dialect is not dialect:
            log.debug(
                f"Record '{self._name}' mixes payload tags at line {self.line_number}"
            )
        self._collected += decode_hex(text, strict=self.strict)
        self.state = _State.IN_PAYLOAD


def iter_records(store_path: str | Path, strict: bool = False) -> Iterator[Record]:
    """
    Yields every complete record in the store, in file order.

    Raises:
        StoreIOError: If the store cannot be opened or read.
    """
    parser = RecordParser(strict=strict)
    try:
        with open(store_path, encoding="utf-8") as f:
            for line in f:
                record = parser.feed(line)
                if record is not None:
                    yield record
    except (OSError, UnicodeDecodeError) as e:
        raise StoreIOError(f"Failed to read store '{store_path}': {e}") from e

    if parser.inside_record:
        log.warning(
            f"Store '{store_path}' ends inside record '{parser.pending_name}'; "
            "the trailing record is incomplete and was ignored"
        )


def find_record(
    store_path: str | Path, target_name: str, strict: bool = False
) -> Record:
    """
    Returns the first record named `target_name`; scanning stops there.

    Raises:
        RecordNotFoundError: If no record in the store has that name.
        StoreIOError: If the store cannot be read.
    """
    records = iter_records(store_path, strict=strict)
    try:
        for record in records:
            if record.name == target_name:
                log.debug(f"Found '{target_name}' in '{store_path}'")
                return record
    finally:
        records.close()
    raise RecordNotFoundError(target_name, str(store_path))


def extract_record(
    store_path: str | Path,
    target_name: str,
    output_path: str | Path,
    progress: TransferTask | None = None,
    strict: bool = False,
) -> Record:
    """
    Writes the payload of the first record named `target_name` to a new file.

    The output file is only created once the record has been found. If writing
    it fails, the partial file is removed before the error is raised.

    Args:
        store_path: Path of the store file.
        target_name: Name of the record to extract.
        output_path: Destination file; overwritten if it exists.
        progress: Optional progress task, advanced in bytes.
        strict: Refuse malformed payload tokens instead of skipping them.

    Returns:
        The extracted record.

    Raises:
        RecordNotFoundError: If no record has that name.
        StoreIOError: If the store cannot be read or the output cannot be written.
    """
    record = find_record(store_path, target_name, strict=strict)
    payload = record.payload

    if progress:
        progress.set_total(len(payload))
    try:
        out = open(output_path, "wb")
    except OSError as e:
        raise StoreIOError(f"Cannot create '{output_path}': {e}") from e

    try:
        with out:
            for i in range(0, len(payload), WRITE_CHUNK_SIZE):
                chunk = payload[i : i + WRITE_CHUNK_SIZE]
                out.write(chunk)
                if progress:
                    progress.advance(len(chunk))
    except OSError as e:
        try:
            os.remove(output_path)
        except OSError:
            log.debug(f"Could not remove partial output '{output_path}'")
        raise StoreIOError(
            f"Failed to write '{target_name}' to '{output_path}': {e}"
        ) from e

    if record.size is not None and not record.size_matches:
        log.warning(
            f"'{target_name}' declares {record.size} bytes but "
            f"{len(payload)} were recovered"
        )
    if progress:
        progress.finish(f"extracted to {Path(output_path).name}")
    log.info(f"Extracted {target_name} -> {output_path}")
    return record


async def extract_record_async(
    store_path: str | Path,
    target_name: str,
    output_path: str | Path,
    progress: TransferTask | None = None,
    strict: bool = False,
) -> Record:
    """Runs `extract_record` in a worker thread to keep the event loop free."""
    return await asyncio.to_thread(
        extract_record, store_path, target_name, output_path, progress, strict
    )
