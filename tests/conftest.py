"""Shared fixtures and helpers for xdrfile unit tests."""

import numpy as np
import pytest

from fake_codec import FakeCodec
from xdrfile import Frame, NativeLibraryError
from xdrfile import native
from xdrfile.utils import config as config_module


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's ~/.xdrfile/config.yaml and environment out of tests."""
    monkeypatch.setenv("XDRFILE_CONFIG", str(tmp_path / "no-such-config.yaml"))
    monkeypatch.delenv("XDRFILE_LIBRARY", raising=False)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def fake_codec():
    """In-process codec with native call counters."""
    return FakeCodec()


@pytest.fixture
def default_fake_codec(fake_codec):
    """Install the fake codec as the process-wide default."""
    previous = native.set_codec(fake_codec)
    yield fake_codec
    native.set_codec(previous)


@pytest.fixture(params=["fake", "libxdrfile"])
def codec(request):
    """Run a test against the fake codec and, when installed, the real library."""
    if request.param == "fake":
        return FakeCodec()
    try:
        return native.LibXDRFile()
    except NativeLibraryError:
        pytest.skip("libxdrfile is not installed")


@pytest.fixture
def sample_frame():
    """Two-atom frame with a non-trivial box."""
    return Frame(
        step=5,
        time=2.0,
        box_vector=[[1.0, 2.0, 3.0], [2.0, 1.0, 3.0], [3.0, 2.0, 1.0]],
        coords=[[1.0, 1.0, 1.0], [1.0, 1.0, 1.0]],
    )


def make_frame(step, num_atoms=2, time=None):
    """Frame whose coordinates encode the step so frames are distinguishable."""
    coords = np.arange(num_atoms * 3, dtype=np.float32).reshape(num_atoms, 3) / 10 + step
    box = np.eye(3, dtype=np.float32) * 3.0
    return Frame(step=step, time=float(step) if time is None else time,
                 box_vector=box, coords=coords)


@pytest.fixture
def frame_factory():
    """Build distinguishable frames by step."""
    return make_frame
