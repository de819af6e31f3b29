"""Decoding of raw PCM bytes into float samples."""

import numpy as np
from numpy.typing import NDArray


def decode_pcm(data: bytes, bits_per_sample: int, channels: int) -> NDArray[np.float32]:
    """Decode interleaved little-endian PCM into normalized floats.

    Args:
        data: Raw PCM bytes. A trailing partial frame is ignored.
        bits_per_sample: 8 (unsigned), 16, 24 or 32 (signed).
        channels: Number of interleaved channels.

    Returns:
        Float32 array of shape (frames, channels) with values in [-1, 1].

    Raises:
        ValueError: If the sample width or channel count is unsupported.
    """
    if channels <= 0:
        raise ValueError(f"channels must be positive, got {channels}")

    sample_width = bits_per_sample // 8
    frame_size = sample_width * channels
    usable = len(data) - len(data) % frame_size if frame_size else 0
    raw = np.frombuffer(bytes(data[:usable]), dtype=np.uint8)

    if bits_per_sample == 8:
        samples = (raw.astype(np.float32) - 128.0) / 128.0
    elif bits_per_sample == 16:
        samples = raw.view("<i2").astype(np.float32) / 32768.0
    elif bits_per_sample == 24:
        samples = _decode_24bit(raw)
    elif bits_per_sample == 32:
        samples = raw.view("<i4").astype(np.float32) / 2147483648.0
    else:
        raise ValueError(f"Unsupported bits per sample: {bits_per_sample}")

    return samples.reshape(-1, channels)


def _decode_24bit(raw: NDArray[np.uint8]) -> NDArray[np.float32]:
    triples = raw.reshape(-1, 3).astype(np.int32)
    values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
    # Sign extend from 24 bits
    values = np.where(values & 0x800000, values - 0x1000000, values)
    return values.astype(np.float32) / 8388608.0


def pcm_levels(samples: NDArray[np.float32]) -> tuple[float, float]:
    """Return (peak, rms) of decoded samples, (0.0, 0.0) when empty."""
    if samples.size == 0:
        return 0.0, 0.0
    peak = float(np.max(np.abs(samples)))
    rms = float(np.sqrt(np.mean(samples.astype(np.float64) ** 2)))
    return peak, rms
