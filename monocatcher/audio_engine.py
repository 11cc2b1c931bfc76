from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import soundfile as sf

from .analyzer import DEFAULT_BLOCK_SIZE, AudioResult, StereoClassifier
from .dsp_utils import EPSILON, peak_dbfs
from .errors import DecodeError, EncodeError
from .output_paths import COLLISION_PREFIX, OutputPathResolver

LOG = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("WAV", "WAVEX", "AIFF")


@dataclass
class MonoCatcherConfig:
    epsilon: float = EPSILON
    block_size: int = DEFAULT_BLOCK_SIZE
    collision_prefix: str = COLLISION_PREFIX
    workers: int = 1
    audio_extensions: tuple[str, ...] = (".wav", ".aif", ".aiff")
    dry_run: bool = False


@dataclass
class AudioBuffer:
    """Decoded PCM audio, shape (frames, channels), normalized float samples."""

    samples: np.ndarray
    sample_rate: int
    subtype: str | None = None
    format: str | None = None
    path: str = "<memory>"

    def __post_init__(self):
        samples = np.asarray(self.samples)
        if samples.ndim == 1:
            samples = samples[:, None]
        if samples.ndim != 2:
            raise ValueError(f"Unexpected audio shape: {samples.shape}")
        self.samples = samples

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def samples_per_channel(self) -> int:
        return int(self.samples.shape[0])

    def channel(self, index: int) -> np.ndarray:
        return self.samples[:, index]

    def to_mono(self) -> AudioBuffer:
        """Keep the left channel only."""
        return AudioBuffer(
            samples=self.samples[:, :1].copy(),
            sample_rate=self.sample_rate,
            subtype=self.subtype,
            format=self.format,
            path=self.path,
        )


class AudioEngine:
    """Reads and writes whole PCM files through libsndfile."""

    def load(self, path: str | Path) -> AudioBuffer:
        path = str(path)
        try:
            info = sf.info(path)
        except (sf.LibsndfileError, RuntimeError, OSError) as exc:
            raise DecodeError(path, str(exc)) from exc
        if info.format not in SUPPORTED_FORMATS:
            raise DecodeError(path, f"not a WAV/AIFF file (format {info.format})")
        try:
            samples, sr = sf.read(path, dtype="float64", always_2d=True)
        except (sf.LibsndfileError, RuntimeError, OSError) as exc:
            raise DecodeError(path, str(exc)) from exc
        return AudioBuffer(samples=samples, sample_rate=int(sr), subtype=info.subtype, format=info.format, path=path)

    def save(self, buffer: AudioBuffer, path: str | Path) -> None:
        path = str(path)
        try:
            sf.write(path, buffer.samples, buffer.sample_rate, subtype=buffer.subtype, format=buffer.format)
        except (sf.LibsndfileError, RuntimeError, OSError, ValueError, TypeError) as exc:
            raise EncodeError(path, str(exc)) from exc


@dataclass
class ProcessedFile:
    result: AudioResult
    destination: str | None


class FileProcessor:
    """Decode, classify, downmix when needed, and write one file."""

    def __init__(
        self,
        config: MonoCatcherConfig | None = None,
        engine: AudioEngine | None = None,
        classifier: StereoClassifier | None = None,
        resolver: OutputPathResolver | None = None,
    ):
        self.config = config or MonoCatcherConfig()
        self.engine = engine or AudioEngine()
        self.classifier = classifier or StereoClassifier(self.config.epsilon, self.config.block_size)
        self.resolver = resolver or OutputPathResolver(self.config.collision_prefix)
        self._path_lock = threading.Lock()

    def process_file(self, source_path: str, destination_dir: str) -> ProcessedFile:
        buffer = self.engine.load(source_path)
        result = self.classifier.classify(buffer)
        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug(
                "%s: %d ch, %d frames @ %d Hz, %s, peak %.1f dBFS",
                source_path,
                buffer.channel_count,
                buffer.samples_per_channel,
                buffer.sample_rate,
                buffer.subtype,
                peak_dbfs(buffer.samples),
            )
        if result is not AudioResult.STEREO:
            buffer = buffer.to_mono()

        # Only decode and classify run in parallel; resolve and write are serialized
        # so the existence check and the file it guards cannot interleave.
        with self._path_lock:
            destination = self.resolver.resolve(source_path, destination_dir)
            if self.config.dry_run:
                LOG.info("[DRY] %s -> %s (%s)", source_path, destination, result.label)
                return ProcessedFile(result=result, destination=None)
            self.engine.save(buffer, destination)

        LOG.info("%s -> %s (%s)", source_path, destination, result.label)
        return ProcessedFile(result=result, destination=destination)

    def process(self, source_path: str, destination_dir: str) -> AudioResult:
        return self.process_file(source_path, destination_dir).result
