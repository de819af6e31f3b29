"""Creation of empty WAV files."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from audiolib.wav.wav_file import HEADER_SIZE, WavFile

EMPTY_WAVE_FILE_SIZE = HEADER_SIZE


@runtime_checkable
class WaveFileCreator(Protocol):
    def create_empty(self, path: Path) -> None:
        """Write an empty WAV file at path, overwriting existing content."""
        ...


class EmptyWaveFileCreator:
    """Creates header-only WAV files with the default format (mono, 44.1 kHz, 16-bit)."""

    def create_empty(self, path: Path) -> None:
        WavFile.create(path)
