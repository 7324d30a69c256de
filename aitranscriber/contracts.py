from __future__ import annotations
from dataclasses import dataclass

_SUPPORTED_BITS = (8, 16, 24, 32)


@dataclass(frozen=True)
class AudioFormat:
    """PCM layout of a capture session. Fixed for the session's lifetime."""
    sample_rate: int = 16000
    channels: int = 1
    bits_per_sample: int = 16

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if self.channels <= 0:
            raise ValueError("channels must be > 0")
        if self.bits_per_sample not in _SUPPORTED_BITS:
            raise ValueError(f"bits_per_sample must be one of {_SUPPORTED_BITS}")

    @property
    def sample_width(self) -> int:
        return self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        # one frame: a sample for every channel
        return self.channels * self.sample_width

    @property
    def bytes_per_second(self) -> int:
        return self.sample_rate * self.block_align

    def duration_of(self, n_bytes: int) -> float:
        return n_bytes / float(self.bytes_per_second)


@dataclass(frozen=True)
class AudioChunk:
    """
    One slice of raw little-endian PCM cut from the live buffer.
    Never mutated after creation.
    """
    pcm: bytes
    fmt: AudioFormat
    index: int
    start_time: float  # seconds since session start
    is_final: bool = False

    @property
    def duration(self) -> float:
        return self.fmt.duration_of(len(self.pcm))


@dataclass(frozen=True)
class TranscriptionResult:
    text: str = ""
    translation: str = ""


@dataclass(frozen=True)
class RealtimeUpdate:
    segment_text: str
    segment_translation: str
    full_transcript: str
    full_translation: str
    is_final_segment: bool


@dataclass(frozen=True)
class TranscriptionFailure:
    error: BaseException
    chunk_index: int


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: str = "en"
    target_lang: str = "fa"


@dataclass(frozen=True)
class TranslationResult:
    source_text: str
    translated_text: str
    provider: str
