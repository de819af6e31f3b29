"""RIFF chunk utilities for WAV containers.

This module provides the FourCC identifiers, error types and the chunk
contract shared by every sub-chunk that can live inside a WAV file.
"""

import struct
from collections.abc import Iterator
from typing import Protocol, runtime_checkable

# FourCC identifiers
RIFF_ID = b"RIFF"
WAVE_ID = b"WAVE"
FMT_ID = b"fmt "
DATA_ID = b"data"
CUE_ID = b"cue "
LIST_ID = b"LIST"
ADTL_ID = b"adtl"
LABL_ID = b"labl"

# Audio format codes
WAVE_FORMAT_PCM = 1

CHUNK_HEADER_SIZE = 8


class RiffError(Exception):
    """Error reading or writing RIFF chunks."""


class InvalidWavFileError(RiffError):
    """The file is too short or its header does not describe a PCM WAV file."""


@runtime_checkable
class RiffChunk(Protocol):
    """A binary sub-chunk that can parse and serialize itself.

    Implementations must keep ``total_size`` equal to ``len(to_bytes())``.
    """

    def parse(self, buffer: bytes) -> None: ...

    def to_bytes(self) -> bytes: ...

    @property
    def total_size(self) -> int: ...


def read_chunk_header(buffer: bytes, offset: int = 0) -> tuple[bytes, int]:
    """Read a RIFF chunk header (FourCC + size) from a buffer.

    Args:
        buffer: Bytes containing the chunk.
        offset: Position of the chunk header within the buffer.

    Returns:
        Tuple of (chunk_id, chunk_size).

    Raises:
        RiffError: If fewer than 8 bytes remain.
    """
    header = buffer[offset : offset + CHUNK_HEADER_SIZE]
    if len(header) < CHUNK_HEADER_SIZE:
        raise RiffError("Unexpected end of buffer reading chunk header")

    chunk_id = bytes(header[:4])
    chunk_size = struct.unpack("<I", header[4:8])[0]
    return chunk_id, chunk_size


def iter_chunks(buffer: bytes) -> Iterator[tuple[bytes, bytes]]:
    """Yield (chunk_id, payload) for each chunk in a buffer.

    Raises:
        RiffError: If a chunk header is truncated or a payload runs past the
            end of the buffer.
    """
    offset = 0
    while offset < len(buffer):
        chunk_id, chunk_size = read_chunk_header(buffer, offset)
        start = offset + CHUNK_HEADER_SIZE
        end = start + chunk_size
        if end > len(buffer):
            raise RiffError(
                f"Chunk {chunk_id!r} declares {chunk_size} bytes but only "
                f"{len(buffer) - start} remain"
            )
        yield chunk_id, bytes(buffer[start:end])

        # Skip to next chunk (with word alignment padding)
        offset = end + (chunk_size % 2)


def pack_chunk(chunk_id: bytes, payload: bytes) -> bytes:
    """Build a complete chunk: header, payload and alignment pad byte."""
    chunk = bytearray(chunk_id)
    chunk.extend(struct.pack("<I", len(payload)))
    chunk.extend(payload)
    if len(payload) % 2:
        chunk.extend(b"\x00")
    return bytes(chunk)
