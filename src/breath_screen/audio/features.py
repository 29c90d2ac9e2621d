"""Feature extraction: ring buffer, spectral transform, per-frame features."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple

import numpy as np


class RingBuffer:
    """Fixed-size ring buffer holding the most recent audio samples."""

    def __init__(self, size: int, dtype: type = np.float32):
        if size < 1:
            raise ValueError("size must be >= 1")
        self.size = size
        self.dtype = dtype
        self._data = np.zeros(size, dtype=dtype)
        self._write_idx = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    @property
    def capacity(self) -> int:
        return self.size

    @property
    def is_full(self) -> bool:
        return self._count == self.size

    def push(self, sample: float) -> None:
        """Append one sample; the oldest is evicted once full."""
        self._data[self._write_idx] = sample
        self._write_idx = (self._write_idx + 1) % self.size
        if self._count < self.size:
            self._count += 1

    def push_batch(self, chunk: np.ndarray) -> None:
        """Append a chunk in order; older data is overwritten."""
        chunk = np.asarray(chunk, dtype=self.dtype).ravel()
        n = len(chunk)
        if n == 0:
            return
        if n >= self.size:
            self._data[:] = chunk[-self.size :]
            self._write_idx = 0
            self._count = self.size
            return
        start = self._write_idx
        end = start + n
        if end <= self.size:
            self._data[start:end] = chunk
        else:
            head = self.size - start
            self._data[start:] = chunk[:head]
            self._data[: end - self.size] = chunk[head:]
        self._write_idx = end % self.size
        self._count = min(self._count + n, self.size)

    def get_all(self) -> np.ndarray:
        """Return all buffered samples in chronological order (a copy)."""
        if self._count == 0:
            return np.array([], dtype=self.dtype)
        if self._count < self.size:
            return self._data[: self._count].copy()
        return np.roll(self._data, -self._write_idx)

    def clear(self) -> None:
        """Reset buffer without reallocating storage."""
        self._write_idx = 0
        self._count = 0


class Spectrum(NamedTuple):
    """Half spectrum of one frame: P/2 bins of the zero-padded transform."""

    real: np.ndarray
    imag: np.ndarray
    magnitudes: np.ndarray


def _padded_length(n: int) -> int:
    """Next power of two >= n (0 for an empty frame)."""
    if n == 0:
        return 0
    return 1 << (n - 1).bit_length()


def spectrum(frame: np.ndarray, method: str = "fft") -> Spectrum:
    """Zero-pad to a power of two and compute the first P/2 DFT bins.

    real[k] = sum x[t] cos(2 pi k t / P), imag[k] = -sum x[t] sin(2 pi k t / P).

    Args:
        frame: 1-D samples, any length.
        method: "fft" (numpy FFT) or "direct" (explicit O(P^2) summation).
            Both produce the same bins within floating-point tolerance.
    """
    x = np.asarray(frame, dtype=np.float64).ravel()
    padded_len = _padded_length(len(x))
    n_bins = padded_len // 2
    if n_bins == 0:
        empty = np.zeros(0, dtype=np.float64)
        return Spectrum(empty, empty.copy(), empty.copy())

    if method == "fft":
        bins = np.fft.rfft(x, n=padded_len)[:n_bins]
        real = bins.real.copy()
        imag = bins.imag.copy()
    elif method == "direct":
        padded = np.zeros(padded_len, dtype=np.float64)
        padded[: len(x)] = x
        t = np.arange(padded_len)
        real = np.empty(n_bins, dtype=np.float64)
        imag = np.empty(n_bins, dtype=np.float64)
        for k in range(n_bins):
            angle = 2 * np.pi * k * t / padded_len
            real[k] = np.dot(padded, np.cos(angle))
            imag[k] = -np.dot(padded, np.sin(angle))
    else:
        raise ValueError(f"unknown spectrum method: {method!r}")

    return Spectrum(real, imag, np.sqrt(real * real + imag * imag))


def frame_energy(frame: np.ndarray) -> float:
    """Mean of squared samples; 0 for an empty frame."""
    x = np.asarray(frame, dtype=np.float64)
    if x.size == 0:
        return 0.0
    return float(np.mean(x * x))


def frame_rms(frame: np.ndarray) -> float:
    return math.sqrt(frame_energy(frame))


def zero_crossing_rate(frame: np.ndarray) -> float:
    """Fraction of adjacent sample pairs whose sign (x >= 0 vs x < 0) differs."""
    x = np.asarray(frame, dtype=np.float64).ravel()
    if len(x) <= 1:
        return 0.0
    non_negative = x >= 0
    crossings = np.count_nonzero(non_negative[1:] != non_negative[:-1])
    return crossings / (len(x) - 1)


def dominant_frequency_bin(magnitudes: np.ndarray) -> int:
    """Index of the strongest bin, ignoring DC. 0 when nothing rises above 0."""
    if len(magnitudes) < 2:
        return 0
    idx = int(np.argmax(magnitudes[1:])) + 1
    if magnitudes[idx] <= 0:
        return 0
    return idx


@dataclass(frozen=True, eq=False)
class FrameFeatures:
    """Features of one analysis frame. The magnitude array is read-only."""

    start_sample: int
    timestamp: float
    energy: float
    rms: float
    zcr: float
    dominant_freq: float
    magnitudes: np.ndarray

    def to_dict(self, include_spectrum: bool = True) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "startSample": self.start_sample,
            "energy": self.energy,
            "rms": self.rms,
            "zcr": self.zcr,
            "dominantFreq": self.dominant_freq,
            "timestamp": self.timestamp,
        }
        if include_spectrum:
            record["fftMagnitudes"] = self.magnitudes.tolist()
        return record


def extract_frame_features(
    frame: np.ndarray,
    start_sample: int,
    sample_rate: int,
    method: str = "fft",
) -> FrameFeatures:
    """Compute energy, RMS, ZCR and dominant frequency of one frame.

    The dominant frequency scales the bin index by the un-padded frame
    length: bin * sample_rate / (len(frame) * 2).
    """
    x = np.asarray(frame, dtype=np.float64)
    energy = frame_energy(x)
    magnitudes = spectrum(x, method=method).magnitudes
    magnitudes.setflags(write=False)
    peak_bin = dominant_frequency_bin(magnitudes)
    dominant_freq = peak_bin * sample_rate / (len(x) * 2) if len(x) else 0.0
    return FrameFeatures(
        start_sample=start_sample,
        timestamp=start_sample / sample_rate,
        energy=energy,
        rms=math.sqrt(energy),
        zcr=zero_crossing_rate(x),
        dominant_freq=float(dominant_freq),
        magnitudes=magnitudes,
    )
