import numpy as np
import pytest

sf = pytest.importorskip("soundfile")


def tone(n: int = 4410, freq: float = 440.0, sr: int = 44100, phase: float = 0.0) -> np.ndarray:
    t = np.arange(n) / sr
    return 0.5 * np.sin(2.0 * np.pi * freq * t + phase)


@pytest.fixture
def write_audio():
    def _write(path, *channels, sr=44100, subtype="PCM_16"):
        data = np.stack(channels, axis=-1) if len(channels) > 1 else channels[0]
        sf.write(str(path), data, sr, subtype=subtype)
        return str(path)

    return _write


@pytest.fixture
def sample_set(tmp_path, write_audio):
    """Mono, fake stereo and true stereo files in one source folder."""
    src = tmp_path / "src"
    src.mkdir()
    left = tone()
    mono = write_audio(src / "a_mono.wav", left)
    fake = write_audio(src / "b_fake.wav", left, left.copy())
    real = write_audio(src / "c_real.wav", left, tone(phase=0.8))
    return mono, fake, real
