from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .dsp_utils import EPSILON, first_mismatch_in_block
from .errors import UnsupportedChannelLayout

if TYPE_CHECKING:
    from .audio_engine import AudioBuffer

LOG = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 65536


class AudioResult(Enum):
    """Result of inspecting one audio buffer."""

    STEREO = "stereo"  # channels differ: true stereo
    FAKE_STEREO = "fake_stereo"  # two channels, identical within epsilon
    MONO = "mono"  # already one channel

    @property
    def label(self) -> str:
        return {
            AudioResult.STEREO: "Stereo",
            AudioResult.FAKE_STEREO: "FakeStereo",
            AudioResult.MONO: "Mono",
        }[self]


class StereoClassifier:
    """Decides whether a buffer is mono, true stereo, or fake stereo.

    The two channels are compared in index order one block at a time and
    the scan stops at the first block holding a pair of samples that are
    not within epsilon of each other.
    """

    def __init__(self, epsilon: float = EPSILON, block_size: int = DEFAULT_BLOCK_SIZE):
        if epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        self.epsilon = float(epsilon)
        self.block_size = int(block_size)

    def _check_layout(self, buffer: AudioBuffer) -> int:
        channels = buffer.channel_count
        if channels not in (1, 2):
            raise UnsupportedChannelLayout(buffer.path, channels)
        return channels

    def first_mismatch(self, buffer: AudioBuffer) -> int | None:
        """Frame index of the first differing L/R pair, None if there is none."""
        if self._check_layout(buffer) == 1:
            return None
        left = buffer.channel(0)
        right = buffer.channel(1)
        n = buffer.samples_per_channel
        for start in range(0, n, self.block_size):
            stop = min(start + self.block_size, n)
            hit = first_mismatch_in_block(left[start:stop], right[start:stop], self.epsilon)
            if hit is not None:
                return start + hit
        return None

    def classify(self, buffer: AudioBuffer) -> AudioResult:
        if self._check_layout(buffer) == 1:
            return AudioResult.MONO
        index = self.first_mismatch(buffer)
        if index is not None:
            LOG.debug("%s: channels differ at frame %d", buffer.path, index)
            return AudioResult.STEREO
        return AudioResult.FAKE_STEREO
