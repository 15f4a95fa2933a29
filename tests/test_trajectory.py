"""Tests for xdrfile.trajectory: the XTC/TRR read/write contract."""

import traceback

import numpy as np
import pytest

from xdrfile import (ClosedFileError, CouldNotCheckAtomCountError, EndOfFileError, ErrorCode,
                     ErrorTask, FileMode, Frame, NativeError, OutOfRangeError, TRRTrajectory,
                     Whence, WrongSizeFrameError, XDRError, XTCTrajectory, XTC_PRECISION)

FORMATS = [
    pytest.param(XTCTrajectory, "xtc", id="xtc"),
    pytest.param(TRRTrajectory, "trr", id="trr"),
]


def _write_frames(cls, path, frames, codec):
    with cls.open_write(path, codec=codec) as trj:
        for frame in frames:
            trj.write(frame)
        trj.flush()


# ===========================================================================
# Round trip
# ===========================================================================
class TestRoundTrip:
    """Test that written frames read back."""

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_write_then_read(self, cls, suffix, codec, sample_frame, tmp_path):
        """A written frame reads back with the same step, time, box and coords."""
        path = tmp_path / f"traj.{suffix}"
        _write_frames(cls, path, [sample_frame], codec)

        with cls.open_read(path, codec=codec) as trj:
            assert trj.get_num_atoms() == 2
            new_frame = Frame.with_capacity(2)
            trj.read(new_frame)

        assert new_frame.num_atoms == sample_frame.num_atoms
        assert new_frame.step == 5
        assert new_frame.time == pytest.approx(2.0)
        np.testing.assert_array_equal(new_frame.box_vector, sample_frame.box_vector)
        np.testing.assert_allclose(new_frame.coords, sample_frame.coords, atol=1.0 / XTC_PRECISION)

    def test_xtc_coords_within_precision(self, fake_codec, frame_factory, tmp_path):
        """XTC coordinates come back within 1/precision."""
        path = tmp_path / "traj.xtc"
        frame = frame_factory(3)
        frame.coords += 0.00042
        _write_frames(XTCTrajectory, path, [frame], fake_codec)

        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            read_back = Frame.with_capacity(2)
            trj.read(read_back)
            assert trj.precision == XTC_PRECISION

        np.testing.assert_allclose(read_back.coords, frame.coords, atol=1.0 / XTC_PRECISION)

    def test_trr_is_full_precision(self, fake_codec, frame_factory, tmp_path):
        """TRR frames come back exactly."""
        path = tmp_path / "traj.trr"
        frame = frame_factory(3)
        frame.coords += 0.00042
        _write_frames(TRRTrajectory, path, [frame], fake_codec)

        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            read_back = Frame.with_capacity(2)
            trj.read(read_back)

        assert read_back == frame

    def test_read_fills_frame_in_place(self, fake_codec, sample_frame, tmp_path):
        """read writes into the frame's existing coordinate buffer."""
        path = tmp_path / "traj.trr"
        _write_frames(TRRTrajectory, path, [sample_frame], fake_codec)

        frame = Frame.with_capacity(2)
        coords_buffer = frame.coords
        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            trj.read(frame)
        assert frame.coords is coords_buffer
        np.testing.assert_array_equal(coords_buffer, sample_frame.coords)

    def test_write_uses_fixed_precision(self, fake_codec, sample_frame, tmp_path, monkeypatch):
        """XTC writes always pass precision 1000."""
        seen = []
        real = fake_codec.write_xtc

        def spy(handle, natoms, step, time, box, coords, precision):
            seen.append(precision)
            return real(handle, natoms, step, time, box, coords, precision)

        monkeypatch.setattr(fake_codec, "write_xtc", spy)
        _write_frames(XTCTrajectory, tmp_path / "traj.xtc", [sample_frame], fake_codec)
        assert seen == [1000.0]

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_write_leaves_frame_untouched(self, cls, suffix, fake_codec, sample_frame, tmp_path):
        """Writing a frame with float64 arrays does not rebind or convert them."""
        coords = np.array(sample_frame.coords, dtype=np.float64)
        box = np.asfortranarray(sample_frame.box_vector)
        sample_frame.coords = coords
        sample_frame.box_vector = box

        _write_frames(cls, tmp_path / f"traj.{suffix}", [sample_frame], fake_codec)

        assert sample_frame.coords is coords
        assert sample_frame.coords.dtype == np.float64
        assert sample_frame.box_vector is box
        assert not sample_frame.box_vector.flags.c_contiguous

        with cls.open_read(tmp_path / f"traj.{suffix}", codec=fake_codec) as trj:
            read_back = Frame.with_capacity(2)
            trj.read(read_back)
        np.testing.assert_array_equal(read_back.box_vector, box)


# ===========================================================================
# Atom count cache
# ===========================================================================
class TestNumAtoms:
    """Test the lazily cached atom count."""

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_metadata_scan_runs_once(self, cls, suffix, fake_codec, sample_frame, tmp_path):
        """Repeated lookups and reads scan the file header only once."""
        path = tmp_path / f"traj.{suffix}"
        _write_frames(cls, path, [sample_frame], fake_codec)

        with cls.open_read(path, codec=fake_codec) as trj:
            counts = [trj.get_num_atoms() for _ in range(3)]
            trj.read(Frame.with_capacity(2))

        assert counts == [2, 2, 2]
        assert fake_codec.calls[f"read_{suffix}_natoms"] == 1

    def test_scan_is_independent_of_cursor(self, fake_codec, frame_factory, tmp_path):
        """The atom count is found even with the cursor at the end of file."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [frame_factory(1), frame_factory(2)], fake_codec)

        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            trj.seek(0, Whence.END)
            assert trj.get_num_atoms() == 2

    def test_failure_is_cached(self, fake_codec, tmp_path):
        """A failed scan is raised again, unchanged, without rescanning."""
        path = tmp_path / "readme.trr"
        path.write_text("not a trajectory\n" * 4)

        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(NativeError) as first:
                trj.get_num_atoms()
            # the file becomes valid, but the cached outcome wins
            path.write_bytes(b"")
            with pytest.raises(NativeError) as second:
                trj.get_num_atoms()

        assert first.value is second.value
        assert first.value.code == ErrorCode.MAGIC
        assert first.value.task == ErrorTask.READ_NUM_ATOMS
        assert fake_codec.calls["read_trr_natoms"] == 1

    def test_cached_failure_traceback_does_not_grow(self, fake_codec, tmp_path):
        """Raising the cached error again starts a fresh traceback each time."""
        path = tmp_path / "readme.xtc"
        path.write_text("not a trajectory\n" * 4)

        depths = []
        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            for _ in range(5):
                with pytest.raises(NativeError) as exc_info:
                    trj.get_num_atoms()
                depths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))

        assert depths[1:] == [depths[1]] * 4

    def test_read_wraps_metadata_failure(self, fake_codec, tmp_path):
        """read reports a failed scan as CouldNotCheckAtomCountError."""
        path = tmp_path / "readme.trr"
        path.write_text("not a trajectory\n" * 4)

        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(CouldNotCheckAtomCountError) as exc_info:
                trj.read(Frame.with_capacity(1))

        err = exc_info.value
        assert err.task == ErrorTask.READ
        assert err.code == ErrorCode.MAGIC
        assert isinstance(err.cause, NativeError)
        assert err.__cause__ is err.cause
        assert fake_codec.calls["read_trr"] == 0


# ===========================================================================
# Pre-I/O checks
# ===========================================================================
class TestGuards:
    """Test checks that run before the native layer is called."""

    @pytest.mark.parametrize("num_atoms", [0, 1, 3])
    def test_wrong_size_frame(self, num_atoms, fake_codec, sample_frame, tmp_path):
        """A frame of the wrong size is rejected without a native call."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [sample_frame], fake_codec)

        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            trj.get_num_atoms()
            calls_before = fake_codec.native_calls()
            with pytest.raises(WrongSizeFrameError) as exc_info:
                trj.read(Frame.with_capacity(num_atoms))
            assert fake_codec.native_calls() == calls_before

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == num_atoms
        assert exc_info.value.task == ErrorTask.READ

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    @pytest.mark.parametrize("step", [-1, 2 ** 31, 2 ** 32 - 1, 2 ** 64 - 1])
    def test_write_rejects_step_out_of_range(self, cls, suffix, step, fake_codec,
                                             sample_frame, tmp_path):
        """A step outside 0..2**31-1 raises and leaves the file unchanged."""
        path = tmp_path / f"traj.{suffix}"
        with cls.open_write(path, codec=fake_codec) as trj:
            trj.write(sample_frame)
            trj.flush()
            size_before = path.stat().st_size

            bad = sample_frame.copy()
            bad.step = step
            with pytest.raises(OutOfRangeError) as exc_info:
                trj.write(bad)
            trj.flush()

        assert path.stat().st_size == size_before
        assert fake_codec.calls[f"write_{suffix}"] == 1
        err = exc_info.value
        assert err.field == "step"
        assert err.value == step
        assert err.target == "int32"
        assert err.task == ErrorTask.WRITE

    def test_largest_int32_step_is_accepted(self, fake_codec, sample_frame, tmp_path):
        """The largest int32 step is written and read back."""
        path = tmp_path / "traj.trr"
        sample_frame.step = 2 ** 31 - 1
        _write_frames(TRRTrajectory, path, [sample_frame], fake_codec)

        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            frame = Frame.with_capacity(2)
            trj.read(frame)
        assert frame.step == 2 ** 31 - 1

    def test_negative_native_step_is_out_of_range_on_read(self, fake_codec, sample_frame,
                                                          tmp_path, monkeypatch):
        """A negative step from the native layer raises on read."""
        path = tmp_path / "traj.trr"
        _write_frames(TRRTrajectory, path, [sample_frame], fake_codec)
        real = fake_codec.read_trr
        monkeypatch.setattr(fake_codec, "read_trr",
                            lambda *args: (ErrorCode.OK, -1) + real(*args)[2:])

        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(OutOfRangeError) as exc_info:
                trj.read(Frame.with_capacity(2))
        assert exc_info.value.field == "step"
        assert exc_info.value.task == ErrorTask.READ

    def test_malformed_box_is_rejected_before_write(self, fake_codec, sample_frame, tmp_path):
        """A box that is not 3x3 never reaches the native write."""
        sample_frame.box_vector = np.zeros(9, dtype=np.float32)
        with XTCTrajectory.open_write(tmp_path / "traj.xtc", codec=fake_codec) as trj:
            with pytest.raises(ValueError):
                trj.write(sample_frame)
        assert fake_codec.calls["write_xtc"] == 0


# ===========================================================================
# Append, EOF and corruption
# ===========================================================================
class TestAppendAndEOF:
    """Test append mode and end-of-file handling."""

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_append(self, cls, suffix, codec, frame_factory, tmp_path):
        """Appended frames follow the existing ones, then EOF."""
        path = tmp_path / f"traj.{suffix}"
        _write_frames(cls, path, [frame_factory(1)], codec)

        with cls.open_append(path, codec=codec) as trj:
            trj.write(frame_factory(2))

        frame = Frame.with_capacity(2)
        with cls.open_read(path, codec=codec) as trj:
            trj.read(frame)
            assert frame.step == 1
            trj.read(frame)
            assert frame.step == 2
            with pytest.raises(EndOfFileError) as exc_info:
                trj.read(frame)
        assert exc_info.value.is_eof()

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_eof_is_distinguished_from_corruption(self, cls, suffix, codec, sample_frame, tmp_path):
        """EOF reports is_eof; a file of zero bytes does not."""
        path = tmp_path / f"traj.{suffix}"
        _write_frames(cls, path, [sample_frame], codec)

        new_frame = Frame.with_capacity(2)
        with cls.open_read(path, codec=codec) as trj:
            trj.read(new_frame)
            with pytest.raises(NativeError) as eof:
                trj.read(new_frame)
        assert eof.value.is_eof()
        assert eof.value.code == ErrorCode.ENDOFFILE
        assert eof.value.task == ErrorTask.READ

        path.write_bytes(bytes(999))
        with cls.open_read(path, codec=codec) as trj:
            with pytest.raises(XDRError) as corrupt:
                trj.read(new_frame)
        assert not corrupt.value.is_eof()

    def test_trajectory_stays_usable_after_error(self, fake_codec, sample_frame, tmp_path):
        """A rejected read does not break later reads."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [sample_frame], fake_codec)

        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(WrongSizeFrameError):
                trj.read(Frame())
            frame = Frame.with_capacity(2)
            trj.read(frame)
        assert frame.step == 5

    def test_write_in_read_mode_is_a_native_error(self, fake_codec, sample_frame, tmp_path):
        """Writing to a file opened for reading fails in the native layer."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [sample_frame], fake_codec)

        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(NativeError) as exc_info:
                trj.write(sample_frame)
        assert exc_info.value.task == ErrorTask.WRITE
        assert not exc_info.value.is_eof()


# ===========================================================================
# Seek / tell
# ===========================================================================
class TestSeekTell:
    """Test byte offsets and cursor movement."""

    @pytest.mark.parametrize("cls, suffix", FORMATS)
    def test_seek_to_second_record(self, cls, suffix, codec, frame_factory, tmp_path):
        """Seeking to the offset after the first record reads the second."""
        path = tmp_path / f"traj.{suffix}"
        with cls.open_write(path, codec=codec) as trj:
            assert trj.tell() == 0
            trj.write(frame_factory(1))
            first_size = trj.tell()
            trj.write(frame_factory(2))
            assert trj.tell() == 2 * first_size

        frame = Frame.with_capacity(2)
        with cls.open_read(path, codec=codec) as trj:
            assert trj.seek(first_size) == first_size
            trj.read(frame)
        assert frame.step == 2
        assert frame.time == pytest.approx(2.0)

    def test_seek_relative(self, fake_codec, frame_factory, tmp_path):
        """Offsets from the end and from the cursor land on record starts."""
        path = tmp_path / "traj.trr"
        frames = [frame_factory(i) for i in range(1, 4)]
        _write_frames(TRRTrajectory, path, frames, fake_codec)
        record = path.stat().st_size // 3

        frame = Frame.with_capacity(2)
        with TRRTrajectory.open_read(path, codec=fake_codec) as trj:
            assert trj.seek(-record, Whence.END) == 2 * record
            trj.read(frame)
            assert frame.step == 3
            assert trj.seek(-2 * record, Whence.CURRENT) == record
            trj.read(frame)
            assert frame.step == 2

    def test_negative_absolute_seek_is_rejected(self, fake_codec, sample_frame, tmp_path):
        """A negative offset from the start raises before the native seek."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [sample_frame], fake_codec)
        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(OutOfRangeError) as exc_info:
                trj.seek(-1)
        assert exc_info.value.task == ErrorTask.SEEK
        assert fake_codec.calls["xdr_seek"] == 0

    def test_seek_failure_is_a_native_error(self, fake_codec, sample_frame, tmp_path):
        """A seek before the start of file is reported by the native layer."""
        path = tmp_path / "traj.xtc"
        _write_frames(XTCTrajectory, path, [sample_frame], fake_codec)
        with XTCTrajectory.open_read(path, codec=fake_codec) as trj:
            with pytest.raises(NativeError) as exc_info:
                trj.seek(-10 ** 6, Whence.CURRENT)
        assert exc_info.value.task == ErrorTask.SEEK


# ===========================================================================
# Lifecycle
# ===========================================================================
class TestLifecycle:
    """Test opening, closing and the default codec."""

    def test_closed_trajectory_rejects_operations(self, fake_codec, sample_frame, tmp_path):
        """Every operation on a closed trajectory raises ClosedFileError."""
        trj = XTCTrajectory.open_write(tmp_path / "traj.xtc", codec=fake_codec)
        trj.close()
        assert trj.closed

        for operation in (lambda: trj.write(sample_frame), trj.flush, trj.tell,
                          trj.get_num_atoms, lambda: trj.seek(0),
                          lambda: trj.read(Frame.with_capacity(2))):
            with pytest.raises(ClosedFileError):
                operation()
        assert fake_codec.calls["xdrfile_close"] == 1

    def test_context_manager_closes_on_error(self, fake_codec, tmp_path):
        """An exception inside the with block still closes the handle."""
        with pytest.raises(RuntimeError):
            with TRRTrajectory.open_write(tmp_path / "traj.trr", codec=fake_codec):
                raise RuntimeError("boom")
        assert fake_codec.open_handles == []
        assert fake_codec.calls["xdrfile_close"] == 1

    def test_open_uses_default_codec(self, default_fake_codec, sample_frame, tmp_path):
        """Without a codec argument the process-wide default is used."""
        path = tmp_path / "traj.xtc"
        with XTCTrajectory.open(path, FileMode.WRITE) as trj:
            trj.write(sample_frame)
        assert trj.mode is FileMode.WRITE
        assert trj.path == path
        assert default_fake_codec.calls["write_xtc"] == 1

    def test_repr_reports_state(self, fake_codec, tmp_path):
        """repr shows whether the trajectory is open."""
        trj = XTCTrajectory.open_write(tmp_path / "traj.xtc", codec=fake_codec)
        assert "open" in repr(trj)
        trj.close()
        assert "closed" in repr(trj)
