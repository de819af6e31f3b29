"""Metadata chunks stored after the PCM payload of a WAV file.

The region that follows the ``data`` chunk is a sequence of ordinary RIFF
chunks. Cue markers (a ``cue `` chunk plus a ``LIST``/``adtl`` chunk with one
``labl`` entry per marker) are understood; anything else is preserved as an
opaque chunk and written back unchanged.
"""

import struct
from dataclasses import dataclass, field

from audiolib.wav.riff import (
    ADTL_ID,
    CHUNK_HEADER_SIZE,
    CUE_ID,
    DATA_ID,
    LABL_ID,
    LIST_ID,
    RiffError,
    iter_chunks,
    pack_chunk,
    read_chunk_header,
)

# id, position, fcc chunk, chunk start, block start, sample offset
_CUE_POINT = struct.Struct("<II4sIII")


@dataclass(frozen=True, order=True)
class CuePoint:
    """A labelled marker at a sample-frame position in the audio."""

    location: int
    """Sample-frame index the marker points at."""

    label: str = ""
    """Free-text label, empty if the marker has none."""


@dataclass
class RawChunk:
    """A chunk that is carried through without being interpreted."""

    chunk_id: bytes = b"JUNK"
    payload: bytes = b""

    def parse(self, buffer: bytes) -> None:
        chunk_id, chunk_size = read_chunk_header(buffer)
        payload = buffer[CHUNK_HEADER_SIZE : CHUNK_HEADER_SIZE + chunk_size]
        if len(payload) < chunk_size:
            raise RiffError(f"Chunk {chunk_id!r} is truncated")
        self.chunk_id = chunk_id
        self.payload = bytes(payload)

    def to_bytes(self) -> bytes:
        return pack_chunk(self.chunk_id, self.payload)

    @property
    def total_size(self) -> int:
        return CHUNK_HEADER_SIZE + len(self.payload) + len(self.payload) % 2


@dataclass
class CueChunk:
    """Cue markers and their labels.

    Serializes to a ``cue `` chunk followed, when any cue is labelled, by a
    ``LIST`` chunk of type ``adtl``. With no cues the chunk is empty and
    occupies zero bytes.
    """

    cues: list[CuePoint] = field(default_factory=list)

    def add_cue(self, location: int, label: str = "") -> CuePoint:
        """Add a marker and keep the list ordered by location."""
        if location < 0:
            raise ValueError(f"Cue location must be non-negative, got {location}")
        cue = CuePoint(location, label)
        self.cues.append(cue)
        self.cues.sort()
        return cue

    def parse(self, buffer: bytes) -> None:
        """Read the ``cue `` and ``LIST``/``adtl`` chunks found in buffer.

        Labels whose id does not match a cue point are ignored; other chunks
        in the buffer are skipped.

        Raises:
            RiffError: If a chunk or the cue point table is truncated.
        """
        locations: dict[int, int] = {}
        labels: dict[int, str] = {}

        for chunk_id, payload in iter_chunks(buffer):
            if chunk_id == CUE_ID:
                locations.update(_parse_cue_points(payload))
            elif chunk_id == LIST_ID and payload[:4] == ADTL_ID:
                labels.update(_parse_labels(payload[4:]))

        self.cues = sorted(
            CuePoint(location, labels.get(cue_id, "")) for cue_id, location in locations.items()
        )

    def to_bytes(self) -> bytes:
        if not self.cues:
            return b""

        cue_payload = bytearray(struct.pack("<I", len(self.cues)))
        labels = bytearray()
        for cue_id, cue in enumerate(self.cues, start=1):
            cue_payload.extend(_CUE_POINT.pack(cue_id, cue.location, DATA_ID, 0, 0, cue.location))
            if cue.label:
                text = cue.label.encode("utf-8") + b"\x00"
                labels.extend(pack_chunk(LABL_ID, struct.pack("<I", cue_id) + text))

        chunk = pack_chunk(CUE_ID, bytes(cue_payload))
        if labels:
            chunk += pack_chunk(LIST_ID, ADTL_ID + bytes(labels))
        return chunk

    @property
    def total_size(self) -> int:
        return len(self.to_bytes())


def _parse_cue_points(payload: bytes) -> dict[int, int]:
    if len(payload) < 4:
        raise RiffError("cue chunk too small")

    count = struct.unpack("<I", payload[:4])[0]
    expected = 4 + count * _CUE_POINT.size
    if len(payload) < expected:
        raise RiffError(f"cue chunk declares {count} points but holds only {len(payload)} bytes")

    locations = {}
    for i in range(count):
        cue_id, _, _, _, _, sample_offset = _CUE_POINT.unpack_from(payload, 4 + i * _CUE_POINT.size)
        locations[cue_id] = sample_offset
    return locations


def _parse_labels(payload: bytes) -> dict[int, str]:
    labels = {}
    for chunk_id, body in iter_chunks(payload):
        if chunk_id != LABL_ID or len(body) < 4:
            continue
        cue_id = struct.unpack("<I", body[:4])[0]
        labels[cue_id] = body[4:].split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return labels


def _is_cue_chunk(chunk_id: bytes, payload: bytes) -> bool:
    return chunk_id == CUE_ID or (chunk_id == LIST_ID and payload[:4] == ADTL_ID)


class WavMetadata:
    """Everything stored after the audio payload.

    Implements the RIFF chunk contract over the whole trailing region: cue
    information is gathered into ``cue_chunk`` and every other chunk is kept
    verbatim in ``extra_chunks``.
    """

    def __init__(self) -> None:
        self.cue_chunk = CueChunk()
        self.extra_chunks: list[RawChunk] = []

    @property
    def cues(self) -> list[CuePoint]:
        return self.cue_chunk.cues

    def add_cue(self, location: int, label: str = "") -> CuePoint:
        """Add a marker, folding any verbatim cue chunks into cue_chunk first.

        Labels that match no cue are discarded at this point since the cue
        ids are renumbered on write.
        """
        kept_cues = [c for c in self.extra_chunks if _is_cue_chunk(c.chunk_id, c.payload)]
        if kept_cues:
            self.cue_chunk.parse(b"".join(c.to_bytes() for c in kept_cues))
            self.extra_chunks = [c for c in self.extra_chunks if c not in kept_cues]
        return self.cue_chunk.add_cue(location, label)

    def parse(self, buffer: bytes) -> None:
        """Populate from the bytes that follow the audio payload.

        Cue chunks that do not serialize back to the same size (no cue
        points, labels without a matching cue) are kept verbatim instead.

        Raises:
            RiffError: If the region is not a well-formed chunk sequence.
        """
        chunks = list(iter_chunks(buffer))
        cue_region = b"".join(
            pack_chunk(chunk_id, payload)
            for chunk_id, payload in chunks
            if _is_cue_chunk(chunk_id, payload)
        )

        cue_chunk = CueChunk()
        cue_chunk.parse(cue_region)
        if cue_chunk.cues and cue_chunk.total_size == len(cue_region):
            extra_chunks = [
                RawChunk(chunk_id, payload)
                for chunk_id, payload in chunks
                if not _is_cue_chunk(chunk_id, payload)
            ]
        else:
            cue_chunk = CueChunk()
            extra_chunks = [RawChunk(chunk_id, payload) for chunk_id, payload in chunks]

        self.cue_chunk = cue_chunk
        self.extra_chunks = extra_chunks

    def to_bytes(self) -> bytes:
        return self.cue_chunk.to_bytes() + b"".join(c.to_bytes() for c in self.extra_chunks)

    @property
    def total_size(self) -> int:
        return self.cue_chunk.total_size + sum(c.total_size for c in self.extra_chunks)
