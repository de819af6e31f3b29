import json
import sys
from pathlib import Path
from typing import Annotated

import numpy as np
from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from audiolib.cli.validators import (
    validate_bits_per_sample,
    validate_non_negative_integer,
    validate_positive_integer,
)
from audiolib.pcm import decode_pcm, pcm_levels
from audiolib.wav import (
    DEFAULT_BITS_PER_SAMPLE,
    DEFAULT_CHANNELS,
    DEFAULT_SAMPLE_RATE,
    InvalidWavFileError,
    RiffError,
    WavFile,
    WavFileReader,
    WavFileWriter,
)

app = App(name="audiolib", help="A utility for creating and inspecting PCM WAV files")
console = Console()

# Frames decoded per read when measuring levels
READ_BLOCK_FRAMES = 8192


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(message, style="bold red")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(message, style="bold green")


def measure_levels(wav: WavFile) -> tuple[float, float]:
    """Stream the audio payload and return (peak, rms) across all samples."""
    peak = 0.0
    sum_squares = 0.0
    count = 0

    buffer = bytearray(wav.frame_size_in_bytes * READ_BLOCK_FRAMES)
    with WavFileReader(wav) as reader:
        while reader.has_remaining():
            length = reader.get_pcm_buffer(buffer)
            if length == 0:
                break
            samples = decode_pcm(bytes(buffer[:length]), wav.bits_per_sample, wav.channels)
            block_peak, block_rms = pcm_levels(samples)
            peak = max(peak, block_peak)
            sum_squares += block_rms**2 * samples.size
            count += samples.size

    rms = float(np.sqrt(sum_squares / count)) if count else 0.0
    return peak, rms


@app.command
def create(
    output: Path,
    channels: Annotated[int, Parameter(validator=validate_positive_integer)] = DEFAULT_CHANNELS,
    sample_rate: Annotated[
        int, Parameter(validator=validate_positive_integer)
    ] = DEFAULT_SAMPLE_RATE,
    bits_per_sample: Annotated[
        int, Parameter(validator=validate_bits_per_sample)
    ] = DEFAULT_BITS_PER_SAMPLE,
) -> int:
    """
    Create an empty WAV file containing only the 44-byte header.

    Parameters
    ----------
    output: Path
        The file to create. Existing content is overwritten.
    channels: int
        The number of audio channels
    sample_rate: int
        The sample rate in Hz
    bits_per_sample: int
        The sample bit depth. Must be a multiple of 8.
    """
    try:
        wav = WavFile.create(
            output,
            channels=channels,
            sample_rate=sample_rate,
            bits_per_sample=bits_per_sample,
        )
    except (OSError, ValueError) as e:
        print_error(f"Error creating {output}: {e}")
        return 1

    print_success(f"Created {wav.path}")
    console.print(f"  {wav.channels} ch, {wav.sample_rate} Hz, {wav.bits_per_sample}-bit")
    return 0


@app.command
def info(file: Path) -> int:
    """
    Display header, metadata and level information about a WAV file.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    """
    if not file.exists():
        print_error(f"Error: File {file} does not exist")
        return 1

    try:
        wav = WavFile.load(file)
        peak, rms = measure_levels(wav)
    except (OSError, RiffError, ValueError) as e:
        print_error(f"Error reading {file}: {e}")
        return 1

    console.print(f"WAV file: {file}")
    console.print(f"  Channels: {wav.channels}")
    console.print(f"  Sample rate: {wav.sample_rate} Hz")
    console.print(f"  Bits per sample: {wav.bits_per_sample}")
    console.print(f"  Frame size: {wav.frame_size_in_bytes} bytes")
    console.print(f"  Audio length: {wav.total_audio_length} bytes ({wav.total_frames} frames)")
    console.print(f"  Data length: {wav.total_data_length} bytes")
    console.print(f"  Duration: {wav.duration:.3f} s")
    console.print(f"  Peak: {peak:.3f}  RMS: {rms:.3f}")

    if not wav.has_metadata:
        console.print("  Metadata: none")
        return 0

    console.print(f"  Metadata: {wav.metadata.total_size} bytes")
    if wav.metadata.cues:
        table = Table(title="Cues")
        table.add_column("Frame", justify="right")
        table.add_column("Time (s)", justify="right")
        table.add_column("Label")
        for cue in wav.metadata.cues:
            seconds = cue.location / wav.sample_rate if wav.sample_rate > 0 else 0.0
            table.add_row(str(cue.location), f"{seconds:.3f}", cue.label)
        console.print(table)
    for chunk in wav.metadata.extra_chunks:
        chunk_name = chunk.chunk_id.decode("ascii", errors="replace")
        console.print(f"  Chunk {chunk_name!r}: {len(chunk.payload)} bytes")

    return 0


@app.command
def validate(
    file: Path,
    output_json: Annotated[bool, Parameter(name=["--json"])] = False,
) -> int:
    """
    Validate the header and metadata of a WAV file.

    Parameters
    ----------
    file: Path
        The path to the .wav file to validate
    output_json: bool
        Output results as JSON (default: False)
    """
    results: dict[str, object] = {
        "file": str(file),
        "valid": True,
        "errors": [],
    }

    try:
        wav = WavFile.load(file)
    except FileNotFoundError:
        results["errors"] = [f"File not found: {file}"]
    except OSError as e:
        results["errors"] = [f"Cannot read file: {e}"]
    except InvalidWavFileError as e:
        results["errors"] = [f"Header error: {e}"]
    except RiffError as e:
        results["errors"] = [f"Metadata error: {e}"]
    else:
        results["channels"] = wav.channels
        results["sample_rate"] = wav.sample_rate
        results["bits_per_sample"] = wav.bits_per_sample
        results["total_audio_length"] = wav.total_audio_length
        results["metadata_size"] = wav.metadata.total_size

    errors = results["errors"]
    results["valid"] = not errors

    if output_json:
        console.print(json.dumps(results, indent=2))
        return 0 if results["valid"] else 1

    if errors:
        for error in errors:
            print_error(f"[FAIL] {error}")
        return 1

    print_success(f"[PASS] {file}")
    return 0


@app.command
def add_cue(
    file: Path,
    location: Annotated[int, Parameter(validator=validate_non_negative_integer)],
    label: str = "",
) -> int:
    """
    Add a cue marker to a WAV file, rewriting its metadata and header lengths.

    Parameters
    ----------
    file: Path
        The path to the .wav file
    location: int
        The sample frame the cue points at
    label: str
        Text label for the cue
    """
    try:
        wav = WavFile.load(file)
    except (OSError, RiffError) as e:
        print_error(f"Error reading {file}: {e}")
        return 1

    if location > wav.total_frames:
        print_error(f"Cue location {location} is past the end of the audio ({wav.total_frames})")
        return 1

    wav.metadata.add_cue(location, label)
    try:
        with WavFileWriter(wav, append=True):
            pass
    except OSError as e:
        print_error(f"Error writing {file}: {e}")
        return 1

    print_success(f"Added cue at frame {location} to {file}")
    return 0


if __name__ == "__main__":
    sys.exit(app())
