# MIT License
# Copyright (c) 2025 Hashborn

"""
Export output delivery.

Stdout mode streams straight to the stream. File mode writes a temp file
next to the target and renames it into place, so the target path only ever
holds the previous document or the complete new one.
"""

import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, Optional

from ...protocol.config.params import COPY_BUFFER_SIZE, GENESIS_FILE_MODE
from ...protocol.crypto.hash import new_sha256
from ...protocol.types.common import GenesisReadError, WriteError

logger = logging.getLogger(__name__)

STDOUT_NAME = "-"


@dataclass(frozen=True)
class WriteSummary:
    output: str
    bytes_written: int
    sha256: str


def iter_chunks(data: bytes, size: int = COPY_BUFFER_SIZE) -> Iterator[bytes]:
    view = memoryview(data)
    for offset in range(0, len(view), size):
        yield view[offset:offset + size]


def iter_reader(src: BinaryIO, size: int = COPY_BUFFER_SIZE) -> Iterator[bytes]:
    while True:
        try:
            chunk = src.read(size)
        except OSError as e:
            raise GenesisReadError(f"failed to read genesis: {e}") from e
        if not chunk:
            return
        yield chunk


class OutputSink:
    def __init__(self, path: Optional[str] = None, stream: Optional[BinaryIO] = None):
        if path is not None and stream is not None:
            raise ValueError("OutputSink takes a path or a stream, not both")
        self.path = path
        self._stream = stream

    @classmethod
    def stdout(cls, stream: Optional[BinaryIO] = None) -> "OutputSink":
        return cls(stream=stream if stream is not None else sys.stdout.buffer)

    @classmethod
    def file(cls, path: str) -> "OutputSink":
        return cls(path=path)

    @classmethod
    def for_target(cls, output_document: Optional[str], stream: Optional[BinaryIO] = None) -> "OutputSink":
        if output_document:
            return cls.file(output_document)
        return cls.stdout(stream)

    @property
    def name(self) -> str:
        return self.path if self.path is not None else STDOUT_NAME

    def write_bytes(self, data: bytes) -> WriteSummary:
        return self._write(iter_chunks(data))

    def copy_from(self, src: BinaryIO) -> WriteSummary:
        return self._write(iter_reader(src))

    def _write(self, chunks: Iterable[bytes]) -> WriteSummary:
        if self.path is not None:
            return self._save_as(self.path, chunks)

        hasher = new_sha256()
        total = 0
        try:
            for chunk in chunks:
                self._stream.write(chunk)
                hasher.update(chunk)
                total += len(chunk)
            self._stream.flush()
        except OSError as e:
            raise WriteError(f"failed to write genesis to stdout: {e}") from e
        return WriteSummary(output=STDOUT_NAME, bytes_written=total, sha256=hasher.hexdigest())

    def _save_as(self, path: str, chunks: Iterable[bytes]) -> WriteSummary:
        target = os.path.abspath(path)
        directory = os.path.dirname(target)
        mode = GENESIS_FILE_MODE
        if os.path.exists(target):
            mode = os.stat(target).st_mode & 0o777

        hasher = new_sha256()
        total = 0
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{os.path.basename(target)}.", suffix=".tmp", dir=directory
            )
        except OSError as e:
            raise WriteError(f"failed to create temp file in {directory}: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    hasher.update(chunk)
                    total += len(chunk)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
        except BaseException as e:
            # Target untouched until os.replace; drop the partial temp file
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            if isinstance(e, OSError):
                raise WriteError(f"failed to write genesis to {path}: {e}") from e
            raise

        logger.info(f"Genesis written to {path} ({total} bytes)")
        return WriteSummary(output=path, bytes_written=total, sha256=hasher.hexdigest())
