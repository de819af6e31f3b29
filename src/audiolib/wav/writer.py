"""Streaming PCM writer that finalizes the WAV header on close.

A WavFile only computes the final lengths; this writer owns the file while
audio is streamed in, then appends the metadata and patches the length fields
of the header in place.
"""

import logging
import struct
from typing import BinaryIO, Self

from audiolib.wav.wav_file import (
    AUDIO_LENGTH_POSITION,
    DATA_LENGTH_POSITION,
    HEADER_SIZE,
    WavFile,
)

logger = logging.getLogger(__name__)


class WavFileWriter:
    """Writes PCM audio into a WAV file.

    Supports the context manager protocol for safe resource handling.

    Args:
        wav: The container to fill, typically from WavFile.create.
        append: Keep the existing audio and add to it. Otherwise any audio
            already in the file is discarded.

    Example:
        wav = WavFile.create(path, channels=2, sample_rate=48000)
        with WavFileWriter(wav) as writer:
            writer.write(chunk)
            writer.write(another_chunk)
        # Header lengths and metadata are written on exit
    """

    def __init__(self, wav: WavFile, *, append: bool = False) -> None:
        self._wav = wav
        self._append = append
        self._file: BinaryIO | None = None
        self._base_length = 0
        self._bytes_written = 0

    @property
    def wav(self) -> WavFile:
        return self._wav

    @property
    def bytes_written(self) -> int:
        """Audio bytes written through this writer."""
        return self._bytes_written

    @property
    def total_audio_length(self) -> int:
        """Audio length the header will record on close."""
        return self._base_length + self._bytes_written

    def open(self) -> None:
        if self._file is not None:
            return

        base_length = self._wav.total_audio_length if self._append else 0
        start = HEADER_SIZE + base_length
        f = open(self._wav.path, "r+b")
        try:
            # Old metadata is dropped here and rewritten after the audio on close
            f.seek(start)
            f.truncate()
        except OSError:
            f.close()
            raise
        self._file = f
        self._base_length = base_length
        self._bytes_written = 0
        logger.debug("Opened %s for writing at offset %d", self._wav.path, start)

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Append PCM bytes to the audio payload.

        Raises:
            RuntimeError: If the writer is not open.
        """
        if self._file is None:
            raise RuntimeError("Writer is not open")
        written = self._file.write(data)
        self._bytes_written += written
        return written

    def close(self) -> None:
        """Record the audio length, append metadata and patch the header."""
        if self._file is None:
            return

        f = self._file
        self._file = None
        with f:
            self._wav.finish_write(self.total_audio_length)
            self._wav.write_metadata(f)
            f.seek(DATA_LENGTH_POSITION)
            f.write(struct.pack("<I", self._wav.total_data_length))
            f.seek(AUDIO_LENGTH_POSITION)
            f.write(struct.pack("<I", self._wav.total_audio_length))

        logger.info(
            "Finalized %s: %d audio bytes, %d metadata bytes",
            self._wav.path,
            self._wav.total_audio_length,
            self._wav.metadata.total_size,
        )

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object,
    ) -> None:
        self.close()
