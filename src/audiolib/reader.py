"""Streaming access to decoded PCM frames."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AudioFileReader(Protocol):
    """A cursor over the PCM frames of an audio source.

    Format attributes are fixed for the lifetime of the reader. The frame
    position moves only through get_pcm_buffer and seek.
    """

    @property
    def sample_rate(self) -> int: ...

    @property
    def channels(self) -> int: ...

    @property
    def sample_size(self) -> int:
        """Bits per sample."""
        ...

    @property
    def frame_position(self) -> int: ...

    @property
    def total_frames(self) -> int: ...

    def has_remaining(self) -> bool: ...

    def get_pcm_buffer(self, buffer: bytearray) -> int:
        """Fill buffer with PCM bytes from the current position.

        Returns:
            Number of bytes written, 0 when no frames remain.
        """
        ...

    def seek(self, sample: int) -> None: ...
