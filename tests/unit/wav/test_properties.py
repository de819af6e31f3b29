"""Property-based tests (Hypothesis) for the WAV container.

These tests verify that:
1. Header round-trip: create -> load recovers the format parameters
2. Finalization keeps the data length consistent with audio and metadata
3. Metadata is detected exactly when the data length exceeds audio + 36
4. Sample indices map to byte offsets by frame size
"""

import struct
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from audiolib.wav import InvalidWavFileError, WavFile
from audiolib.wav.metadata import CueChunk
from audiolib.wav.riff import pack_chunk

fixture_settings = settings(
    max_examples=50,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)

channels_strategy = st.sampled_from([1, 2])
sample_rate_strategy = st.sampled_from([8000, 44100, 48000])
bits_strategy = st.sampled_from([8, 16, 24])


@st.composite
def cue_lists(draw: st.DrawFn) -> list[tuple[int, str]]:
    """Generate cue markers with short ASCII labels."""
    return draw(
        st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=2**31),
                st.text(alphabet="abcdefghij XYZ0123456789", max_size=12),
            ),
            max_size=8,
        )
    )


class TestHeaderRoundTrip:
    @fixture_settings
    @given(channels=channels_strategy, sample_rate=sample_rate_strategy, bits=bits_strategy)
    def test_create_then_load(
        self, tmp_path: Path, channels: int, sample_rate: int, bits: int
    ) -> None:
        path = tmp_path / "roundtrip.wav"
        WavFile.create(path, channels=channels, sample_rate=sample_rate, bits_per_sample=bits)

        wav = WavFile.load(path)

        assert wav.channels == channels
        assert wav.sample_rate == sample_rate
        assert wav.bits_per_sample == bits
        assert wav.total_audio_length == 0
        assert wav.frame_size_in_bytes == channels * bits // 8

    @fixture_settings
    @given(data=st.binary(max_size=43))
    def test_short_input_always_invalid(self, tmp_path: Path, data: bytes) -> None:
        path = tmp_path / "short.wav"
        path.write_bytes(data)

        with pytest.raises(InvalidWavFileError):
            WavFile.load(path)


class TestFinishWrite:
    @fixture_settings
    @given(audio_length=st.integers(min_value=0, max_value=2**31), cues=cue_lists())
    def test_data_length_consistency(
        self, tmp_path: Path, audio_length: int, cues: list[tuple[int, str]]
    ) -> None:
        wav = WavFile.create(tmp_path / "finish.wav")
        for location, label in cues:
            wav.metadata.add_cue(location, label)

        wav.finish_write(audio_length)

        assert wav.total_data_length == 36 + audio_length + wav.metadata.total_size


class TestMetadataThreshold:
    @fixture_settings
    @given(
        audio_length=st.integers(min_value=0, max_value=64),
        payload=st.binary(min_size=0, max_size=32),
        declared_extra=st.integers(min_value=-8, max_value=0),
    )
    def test_detected_only_above_threshold(
        self, tmp_path: Path, audio_length: int, payload: bytes, declared_extra: int
    ) -> None:
        """Test that metadata is read iff data length > audio length + 36."""
        chunk = pack_chunk(b"JUNK", payload)
        wav = WavFile.create(tmp_path / "threshold.wav")
        wav.finish_write(audio_length)
        header = bytearray(wav.header_bytes())

        path = tmp_path / "threshold.wav"
        # Declared data length stops at or before the end of the audio
        header[4:8] = struct.pack("<I", max(0, 36 + audio_length + declared_extra))
        path.write_bytes(bytes(header) + bytes(audio_length) + chunk)
        assert not WavFile.load(path).has_metadata

        header[4:8] = struct.pack("<I", 36 + audio_length + len(chunk))
        path.write_bytes(bytes(header) + bytes(audio_length) + chunk)
        loaded = WavFile.load(path)
        assert loaded.has_metadata
        assert loaded.metadata.total_size == len(chunk)

    def test_empty_cue_chunk_counts_as_metadata(self, tmp_path: Path) -> None:
        """Test that a cue chunk with no points is kept rather than dropped."""
        region = pack_chunk(b"cue ", struct.pack("<I", 0))
        path = tmp_path / "empty_cue.wav"
        wav = WavFile.create(path)
        wav.finish_write(0)
        header = bytearray(wav.header_bytes())
        header[4:8] = struct.pack("<I", 36 + len(region))
        path.write_bytes(bytes(header) + region)

        loaded = WavFile.load(path)

        assert loaded.has_metadata
        assert loaded.metadata.total_size == len(region)
        assert loaded.metadata.to_bytes() == region

    def test_unmatched_labels_count_as_metadata(self, tmp_path: Path) -> None:
        """Test that an adtl list whose labels match no cue is preserved."""
        label = pack_chunk(b"labl", struct.pack("<I", 9) + b"lost\x00")
        region = pack_chunk(b"LIST", b"adtl" + label)
        path = tmp_path / "orphan_labels.wav"
        wav = WavFile.create(path)
        wav.finish_write(4)
        header = bytearray(wav.header_bytes())
        header[4:8] = struct.pack("<I", 36 + 4 + len(region))
        path.write_bytes(bytes(header) + bytes(4) + region)

        loaded = WavFile.load(path)

        assert loaded.has_metadata
        assert loaded.metadata.total_size == len(region)
        assert loaded.metadata.to_bytes() == region


class TestSampleIndex:
    @fixture_settings
    @given(
        channels=channels_strategy,
        bits=bits_strategy,
        sample=st.integers(min_value=0, max_value=10**9),
    )
    def test_sample_to_byte(self, tmp_path: Path, channels: int, bits: int, sample: int) -> None:
        wav = WavFile.create(tmp_path / "index.wav", channels=channels, bits_per_sample=bits)

        assert wav.sample_index(sample) == sample * channels * (bits // 8)


class TestCueChunkSize:
    @given(cues=cue_lists())
    def test_total_size_matches_serialization(self, cues: list[tuple[int, str]]) -> None:
        chunk = CueChunk()
        for location, label in cues:
            chunk.add_cue(location, label)

        data = chunk.to_bytes()
        assert chunk.total_size == len(data)

        parsed = CueChunk()
        parsed.parse(data)
        assert parsed.total_size == len(data)
