from __future__ import annotations

import math
from array import array

_PCM16_FULL_SCALE = 32768.0


def pcm16_rms(pcm16: bytes) -> float:
    """Return RMS energy for little-endian int16 PCM bytes."""
    if len(pcm16) < 2:
        return 0.0

    samples = array("h")
    samples.frombytes(pcm16[: len(pcm16) - (len(pcm16) % 2)])

    sum_sq = 0.0
    for value in samples:
        fv = float(value)
        sum_sq += fv * fv
    return math.sqrt(sum_sq / len(samples))


def level_percent(pcm16: bytes) -> int:
    """Meter level 0-100 on a dBFS scale (-60 dB .. 0 dB)."""
    rms = pcm16_rms(pcm16)
    if rms <= 0.0:
        return 0
    db = 20.0 * math.log10(rms / _PCM16_FULL_SCALE)
    return int(round(max(0.0, min(1.0, (db + 60.0) / 60.0)) * 100))
