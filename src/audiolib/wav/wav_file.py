"""WAV container with a fixed 44-byte PCM header.

Layout on disk::

    +----------------------------------------+  offset 0
    | RIFF header ("WAVE")                   |
    | fmt  chunk (PCM format)                |
    | data chunk header                      |
    +----------------------------------------+  offset 44
    | PCM audio (total_audio_length bytes)   |
    +----------------------------------------+
    | metadata chunks (cue, LIST, ...)       |
    +----------------------------------------+

See http://soundfile.sapp.org/doc/WaveFormat/ for the field equations.
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from audiolib.wav.metadata import WavMetadata
from audiolib.wav.riff import (
    CHUNK_HEADER_SIZE,
    DATA_ID,
    FMT_ID,
    RIFF_ID,
    WAVE_FORMAT_PCM,
    WAVE_ID,
    InvalidWavFileError,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 1
DEFAULT_BITS_PER_SAMPLE = 16

HEADER_SIZE = 44
DATA_LENGTH_POSITION = 4
AUDIO_LENGTH_POSITION = 40

# Bytes counted by the RIFF size field that precede the audio payload
HEADER_DATA_LENGTH = HEADER_SIZE - CHUNK_HEADER_SIZE

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


@dataclass(frozen=True)
class WavFormat:
    """PCM format parameters of a WAV file."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    channels: int = DEFAULT_CHANNELS
    bits_per_sample: int = DEFAULT_BITS_PER_SAMPLE

    @property
    def frame_size_in_bytes(self) -> int:
        return self.channels * (self.bits_per_sample // 8)

    @property
    def byte_rate(self) -> int:
        return (self.bits_per_sample * self.sample_rate * self.channels) // 8

    @property
    def block_align(self) -> int:
        return (self.channels * self.bits_per_sample) // 8

    def validate(self) -> None:
        """Check that the format can be written as a byte-aligned PCM header.

        Raises:
            ValueError: If any value is non-positive, does not fit its header
                field, or bits_per_sample is not a multiple of 8.
        """
        if not 0 < self.channels <= _U16_MAX:
            raise ValueError(f"channels must be between 1 and {_U16_MAX}, got {self.channels}")
        if not 0 < self.sample_rate <= _U32_MAX:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.bits_per_sample <= 0 or self.bits_per_sample % 8:
            raise ValueError(
                f"bits_per_sample must be a positive multiple of 8, got {self.bits_per_sample}"
            )
        if self.byte_rate > _U32_MAX or self.block_align > _U16_MAX:
            raise ValueError("Format parameters overflow the byte rate or block align fields")


class WavFile:
    """A WAV container bound to a file path.

    Use :meth:`load` to read an existing file or :meth:`create` to initialize
    a new one. Format parameters never change after construction; only the
    audio and data lengths move, through :meth:`finish_write`.
    """

    def __init__(
        self,
        path: Path,
        wav_format: WavFormat,
        *,
        total_audio_length: int = 0,
        total_data_length: int = HEADER_DATA_LENGTH,
        metadata: WavMetadata | None = None,
    ) -> None:
        self._path = path
        self._format = wav_format
        self.total_audio_length = total_audio_length
        self.total_data_length = total_data_length
        self.metadata = metadata if metadata is not None else WavMetadata()

    @classmethod
    def load(cls, path: Path | str) -> "WavFile":
        """Read the header and metadata of an existing WAV file.

        Args:
            path: The file to read.

        Returns:
            WavFile describing the file.

        Raises:
            InvalidWavFileError: If the file is shorter than the header or the
                header does not describe a PCM WAV file.
            RiffError: If the trailing metadata is malformed.
            OSError: If the file cannot be read.
        """
        path = Path(path)
        wav = cls._parse_header(path)
        wav._parse_metadata()
        return wav

    @classmethod
    def create(
        cls,
        path: Path | str,
        channels: int = DEFAULT_CHANNELS,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        bits_per_sample: int = DEFAULT_BITS_PER_SAMPLE,
    ) -> "WavFile":
        """Initialize a WAV header in a file, replacing any existing content.

        The new file holds only the 44-byte header with an audio length of
        zero; audio is appended afterwards and recorded with finish_write.

        Raises:
            ValueError: If the format parameters are invalid.
            OSError: If the file cannot be written.
        """
        wav_format = WavFormat(sample_rate, channels, bits_per_sample)
        wav_format.validate()

        wav = cls(Path(path), wav_format)
        wav._initialize()
        return wav

    @property
    def path(self) -> Path:
        return self._path

    @property
    def format(self) -> WavFormat:
        return self._format

    @property
    def sample_rate(self) -> int:
        return self._format.sample_rate

    @property
    def channels(self) -> int:
        return self._format.channels

    @property
    def bits_per_sample(self) -> int:
        return self._format.bits_per_sample

    @property
    def frame_size_in_bytes(self) -> int:
        return self._format.frame_size_in_bytes

    @property
    def has_metadata(self) -> bool:
        return self.metadata.total_size > 0

    @property
    def total_frames(self) -> int:
        """Number of whole frames in the audio payload."""
        if self.frame_size_in_bytes <= 0:
            return 0
        return self.total_audio_length // self.frame_size_in_bytes

    @property
    def duration(self) -> float:
        """Length of the audio payload in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.total_frames / self.sample_rate

    def sample_index(self, sample: int) -> int:
        """Byte offset of a sample frame within the audio payload."""
        return sample * self.frame_size_in_bytes

    def finish_write(self, total_audio_length: int) -> None:
        """Record the final audio length and recompute the RIFF data length.

        This only updates the in-memory values; rewriting the header on disk
        is up to the caller (see WavFileWriter).
        """
        if total_audio_length < 0:
            raise ValueError(f"Audio length must be non-negative, got {total_audio_length}")
        self.total_audio_length = total_audio_length
        self.total_data_length = HEADER_DATA_LENGTH + total_audio_length + self.metadata.total_size
        logger.debug(
            "Finished %s: audio=%d data=%d", self._path, total_audio_length, self.total_data_length
        )

    def write_metadata(self, stream: BinaryIO) -> None:
        """Write the serialized metadata chunks to a binary stream."""
        stream.write(self.metadata.to_bytes())

    def header_bytes(self) -> bytes:
        """Build the 44-byte header for the current format and lengths.

        The fmt chunk size field holds bits_per_sample rather than the usual
        constant 16; existing files depend on this layout.
        """
        fmt = self._format
        return _HEADER.pack(
            RIFF_ID,
            self.total_data_length,
            WAVE_ID,
            FMT_ID,
            fmt.bits_per_sample,
            WAVE_FORMAT_PCM,
            fmt.channels,
            fmt.sample_rate,
            fmt.byte_rate,
            fmt.block_align,
            fmt.bits_per_sample,
            DATA_ID,
            self.total_audio_length,
        )

    def _initialize(self) -> None:
        self.total_data_length = HEADER_DATA_LENGTH
        self.total_audio_length = 0

        with open(self._path, "wb") as f:
            f.write(self.header_bytes())
        logger.debug("Initialized WAV header in %s (%s)", self._path, self._format)

    @classmethod
    def _parse_header(cls, path: Path) -> "WavFile":
        with open(path, "rb") as f:
            header = f.read(HEADER_SIZE)

        if len(header) < HEADER_SIZE:
            raise InvalidWavFileError(
                f"{path} is {len(header)} bytes, shorter than the {HEADER_SIZE}-byte WAV header"
            )

        (
            riff,
            total_data_length,
            wave,
            fmt,
            _fmt_size,
            audio_format,
            channels,
            sample_rate,
            _byte_rate,
            _block_align,
            bits_per_sample,
            _data,
            total_audio_length,
        ) = _HEADER.unpack(header)

        if riff != RIFF_ID:
            raise InvalidWavFileError(f"{path} is not a RIFF file (tag {riff!r})")
        if wave != WAVE_ID:
            raise InvalidWavFileError(f"{path} is not a WAVE file (tag {wave!r})")
        if fmt != FMT_ID:
            raise InvalidWavFileError(f"{path} has no fmt chunk at offset 12 (tag {fmt!r})")
        if audio_format != WAVE_FORMAT_PCM:
            raise InvalidWavFileError(f"{path} is not linear PCM (format code {audio_format})")

        logger.debug(
            "Parsed header of %s: %d ch, %d Hz, %d bits, audio=%d data=%d",
            path,
            channels,
            sample_rate,
            bits_per_sample,
            total_audio_length,
            total_data_length,
        )
        return cls(
            path,
            WavFormat(sample_rate, channels, bits_per_sample),
            total_audio_length=total_audio_length,
            total_data_length=total_data_length,
        )

    def _parse_metadata(self) -> None:
        metadata_size = self.total_data_length - self.total_audio_length - HEADER_DATA_LENGTH
        if metadata_size <= 0:
            return

        with open(self._path, "rb") as f:
            f.seek(HEADER_SIZE + self.total_audio_length)
            buffer = f.read(metadata_size)

        logger.debug("Reading %d bytes of metadata from %s", metadata_size, self._path)
        self.metadata.parse(buffer)

    def __repr__(self) -> str:
        return (
            f"WavFile(path={str(self._path)!r}, channels={self.channels}, "
            f"sample_rate={self.sample_rate}, bits_per_sample={self.bits_per_sample}, "
            f"total_audio_length={self.total_audio_length})"
        )
