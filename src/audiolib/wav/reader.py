"""AudioFileReader over the audio payload of a WavFile."""

import logging
from pathlib import Path
from typing import BinaryIO, Self

from audiolib.wav.riff import RiffError
from audiolib.wav.wav_file import HEADER_SIZE, WavFile

logger = logging.getLogger(__name__)


class WavFileReader:
    """Reads PCM frames from a WAV file.

    Only the audio payload is visible; trailing metadata is never returned.
    Seeking outside the payload clamps to the nearest valid position, so
    seek(-1) rewinds to the start and any index past the end lands at
    total_frames.

    Example:
        with WavFileReader(WavFile.load(path)) as reader:
            buffer = bytearray(4096)
            while reader.has_remaining():
                n = reader.get_pcm_buffer(buffer)
                consume(buffer[:n])
    """

    def __init__(self, wav: WavFile) -> None:
        self._wav = wav
        self._file: BinaryIO | None = None
        self._frame_position = 0

    @classmethod
    def from_path(cls, path: Path | str) -> "WavFileReader":
        return cls(WavFile.load(path))

    @property
    def sample_rate(self) -> int:
        return self._wav.sample_rate

    @property
    def channels(self) -> int:
        return self._wav.channels

    @property
    def sample_size(self) -> int:
        return self._wav.bits_per_sample

    @property
    def frame_position(self) -> int:
        return self._frame_position

    @property
    def total_frames(self) -> int:
        return self._wav.total_frames

    def open(self) -> None:
        """Acquire the read handle. Calling open twice is a no-op."""
        if self._file is None:
            self._file = open(self._wav.path, "rb")
            logger.debug("Opened %s for reading", self._wav.path)

    def release(self) -> None:
        """Close the read handle if it is open."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Released %s", self._wav.path)

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: object,
    ) -> None:
        self.release()

    def has_remaining(self) -> bool:
        return self._frame_position < self.total_frames

    def get_pcm_buffer(self, buffer: bytearray | memoryview) -> int:
        """Fill buffer with whole frames from the current position.

        Returns:
            Number of bytes written into buffer; 0 once the payload is
            exhausted or the buffer cannot hold a single frame.

        Raises:
            RuntimeError: If the reader is not open.
            RiffError: If the file ends before the declared audio length.
        """
        if self._file is None:
            raise RuntimeError("Reader is not open")

        frame_size = self._wav.frame_size_in_bytes
        if frame_size <= 0 or not self.has_remaining():
            return 0
        frames = min(len(buffer) // frame_size, self.total_frames - self._frame_position)
        if frames <= 0:
            return 0

        self._file.seek(HEADER_SIZE + self._wav.sample_index(self._frame_position))
        data = self._file.read(frames * frame_size)
        length = len(data) - len(data) % frame_size
        if length == 0:
            raise RiffError(
                f"{self._wav.path} ends at frame {self._frame_position} of {self.total_frames}"
            )

        buffer[:length] = data[:length]
        self._frame_position += length // frame_size
        return length

    def seek(self, sample: int) -> None:
        self._frame_position = min(max(sample, 0), self.total_frames)
