"""audiolib - PCM WAV container toolkit.

This package reads and writes the header and trailing metadata of
uncompressed PCM WAV files and streams raw PCM frames out of them.

Example Usage
-------------
>>> from audiolib import WavFile, WavFileReader
>>> wav = WavFile.load("take.wav")
>>> print(f"{wav.channels} ch, {wav.sample_rate} Hz, {wav.total_frames} frames")
>>> with WavFileReader(wav) as reader:
...     buffer = bytearray(wav.frame_size_in_bytes * 1024)
...     n = reader.get_pcm_buffer(buffer)
"""

from audiolib.reader import AudioFileReader
from audiolib.wav import (
    EMPTY_WAVE_FILE_SIZE,
    CuePoint,
    EmptyWaveFileCreator,
    InvalidWavFileError,
    RiffChunk,
    RiffError,
    WaveFileCreator,
    WavFile,
    WavFileReader,
    WavFileWriter,
    WavFormat,
    WavMetadata,
)

__all__ = [
    # Container
    "WavFile",
    "WavFormat",
    "WavMetadata",
    "CuePoint",
    "RiffChunk",
    # Streaming
    "AudioFileReader",
    "WavFileReader",
    "WavFileWriter",
    # Creation
    "WaveFileCreator",
    "EmptyWaveFileCreator",
    "EMPTY_WAVE_FILE_SIZE",
    # Errors
    "RiffError",
    "InvalidWavFileError",
]
