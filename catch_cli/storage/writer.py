"""
Appends records to a store file in either dialect.

The layout written here is the persisted-state contract of the store and is
kept byte-for-byte compatible with existing store files.
"""

import asyncio
import logging
from pathlib import Path

from catch_cli.cli.progress_manager import TransferTask
from catch_cli.exceptions import StoreIOError
from catch_cli.models.record import Dialect, Record
from catch_cli.storage.codec import encode_decimal, encode_hex, encode_octal

log = logging.getLogger(__name__)

BYTES_PER_LINE = 16


def _write_quantum(f, payload: bytes) -> None:
    f.write(
        f"[DEC] {encode_decimal(payload)}\n"
        f"[OCT] {encode_octal(payload)}\n"
        f"[HEX] {encode_hex(payload)}\n"
        f"{Dialect.QUANTUM.end_marker}\n"
    )


def _write_standard(f, payload: bytes, progress: TransferTask | None) -> None:
    f.write("DATA: ")
    for i in range(0, len(payload), BYTES_PER_LINE):
        chunk = payload[i : i + BYTES_PER_LINE]
        line = "".join(f"{b:02X} " for b in chunk)
        if len(chunk) == BYTES_PER_LINE:
            line += "\n"
        f.write(line)
        if progress:
            progress.advance(len(chunk))
    f.write(f"\n{Dialect.STANDARD.end_marker}\n")


def append_record(
    store_path: str | Path,
    name: str,
    payload: bytes,
    dialect: Dialect,
    progress: TransferTask | None = None,
) -> Record:
    """
    Appends one record to the store, creating the file if needed.

    Args:
        store_path: Path of the store file.
        name: Record name, written verbatim on the NAME: line.
        payload: The bytes to store.
        dialect: Encoding to use for this record.
        progress: Optional progress task, advanced in bytes (Standard only).

    Returns:
        The record as written.

    Raises:
        ValueError: If the name contains a line break.
        StoreIOError: If the store cannot be opened or written. A record that
            was partially written stays in the file without an end marker.
    """
    if "\n" in name or "\r" in name:
        raise ValueError(f"Record name cannot contain line breaks: {name!r}")

    try:
        with open(store_path, "a", encoding="utf-8", newline="\n") as f:
            f.write(f"{dialect.begin_marker}\nNAME:{name}\nSIZE:{len(payload)}\n")
            if dialect is Dialect.QUANTUM:
                _write_quantum(f, payload)
            else:
                _write_standard(f, payload, progress)
    except (OSError, UnicodeEncodeError) as e:
        raise StoreIOError(f"Failed to append '{name}' to '{store_path}': {e}") from e

    log.debug(
        f"Appended '{name}' ({len(payload)} bytes, {dialect.value}) to '{store_path}'"
    )
    if progress:
        progress.finish(f"stored in {Path(store_path).name}")
    return Record(name=name, payload=payload, dialect=dialect, size=len(payload))


async def append_record_async(
    store_path: str | Path,
    name: str,
    payload: bytes,
    dialect: Dialect,
    progress: TransferTask | None = None,
) -> Record:
    """Runs `append_record` in a worker thread to keep the event loop free."""
    return await asyncio.to_thread(
        append_record, store_path, name, payload, dialect, progress
    )
