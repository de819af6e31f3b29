"""WAV container reading and writing.

Example Usage
-------------
>>> from audiolib.wav import WavFile, WavFileWriter
>>> wav = WavFile.create("take.wav", channels=1, sample_rate=44100, bits_per_sample=16)
>>> with WavFileWriter(wav) as writer:
...     writer.write(pcm_bytes)
>>> WavFile.load("take.wav").total_audio_length
"""

from audiolib.wav.creator import EMPTY_WAVE_FILE_SIZE, EmptyWaveFileCreator, WaveFileCreator
from audiolib.wav.metadata import CueChunk, CuePoint, RawChunk, WavMetadata
from audiolib.wav.reader import WavFileReader
from audiolib.wav.riff import InvalidWavFileError, RiffChunk, RiffError
from audiolib.wav.wav_file import (
    DEFAULT_BITS_PER_SAMPLE,
    DEFAULT_CHANNELS,
    DEFAULT_SAMPLE_RATE,
    HEADER_SIZE,
    WavFile,
    WavFormat,
)
from audiolib.wav.writer import WavFileWriter

__all__ = [
    # Container
    "WavFile",
    "WavFormat",
    "HEADER_SIZE",
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_CHANNELS",
    "DEFAULT_BITS_PER_SAMPLE",
    # Chunks
    "RiffChunk",
    "WavMetadata",
    "CueChunk",
    "CuePoint",
    "RawChunk",
    # Streaming
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
