"""Tests for MemoryFile handles: positions, flags and shared buffers."""

import io
import os

import pytest

from memfs import MemoryFS


class TestHandleReadWrite:
    def test_write_then_read_back(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")

        assert f.write(b"hello") == 5
        f.seek(0)

        assert f.read() == b"hello"
        assert f.read() == b""

    def test_read_advances_position(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abcdef")
        f = fs.open("/f.txt")

        assert f.read(2) == b"ab"
        assert f.tell() == 2
        assert f.read(10) == b"cdef"
        assert f.read(1) == b""

    def test_read_at_does_not_move_position(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abcdef")
        f = fs.open("/f.txt")

        assert f.read_at(3, 2) == b"cde"
        assert f.tell() == 0

    def test_write_at_moves_position_past_write(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")

        f.write_at(b"xyz", 4)

        assert f.tell() == 7
        assert fs.read_file("/f.txt") == b"\x00\x00\x00\x00xyz"

    def test_write_rejects_non_bytes(self):
        """An int is not a byte count: nothing is written and the size stays put."""
        fs = MemoryFS()
        f = fs.create("/f.txt")

        with pytest.raises(TypeError):
            f.write(5)
        with pytest.raises(TypeError):
            f.write_at(3, 2)

        assert f.tell() == 0
        assert fs.stat("/f.txt").size == 0

    def test_readinto(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abc")
        f = fs.open("/f.txt")
        buf = bytearray(5)

        assert f.readinto(buf) == 3
        assert bytes(buf[:3]) == b"abc"

    def test_handle_name_is_opened_path(self):
        fs = MemoryFS()
        f = fs.create("/dir/f.txt")
        assert f.name == "/dir/f.txt"
        assert f.stat().name == "f.txt"


class TestHandleSeek:
    def test_seek_whence_modes(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"0123456789")
        f = fs.open("/f.txt")

        assert f.seek(3) == 3
        assert f.seek(2, os.SEEK_CUR) == 5
        assert f.seek(-4, os.SEEK_END) == 6
        assert f.read() == b"6789"

    def test_seek_past_end_then_write_fills_gap(self):
        """Seeking is not clamped; the gap shows up on the next write."""
        fs = MemoryFS()
        f = fs.create("/f.txt")
        f.write(b"ab")

        assert f.seek(5) == 5
        f.write(b"z")

        assert fs.read_file("/f.txt") == b"ab\x00\x00\x00z"

    def test_negative_position_fails_on_read(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abc")
        f = fs.open("/f.txt")

        assert f.seek(-10, os.SEEK_CUR) == -10
        with pytest.raises(OSError):
            f.read()

    def test_invalid_whence_raises(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")
        with pytest.raises(ValueError):
            f.seek(0, 42)


class TestHandleAccessMode:
    def test_read_only_rejects_write(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abc")
        f = fs.open("/f.txt")

        with pytest.raises(io.UnsupportedOperation):
            f.write(b"x")
        with pytest.raises(io.UnsupportedOperation):
            f.truncate(0)
        assert fs.read_file("/f.txt") == b"abc"

    def test_write_only_rejects_read(self):
        fs = MemoryFS()
        f = fs.open_file("/f.txt", os.O_WRONLY | os.O_CREAT)

        f.write(b"abc")
        with pytest.raises(io.UnsupportedOperation):
            f.read()
        with pytest.raises(io.UnsupportedOperation):
            f.read_at(1, 0)

    def test_read_write_allows_both(self):
        fs = MemoryFS()
        f = fs.open_file("/f.txt", os.O_RDWR | os.O_CREAT)

        f.write(b"abc")
        f.seek(0)

        assert f.read() == b"abc"
        assert f.readable() and f.writable() and f.seekable()

    def test_read_only_with_create_is_readable(self):
        fs = MemoryFS()
        f = fs.open_file("/f.txt", os.O_RDONLY | os.O_CREAT)
        assert f.read() == b""


class TestHandleFlags:
    def test_trunc_empties_shared_buffer(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"old content")
        reader = fs.open("/f.txt")

        fs.open_file("/f.txt", os.O_WRONLY | os.O_TRUNC)

        assert fs.stat("/f.txt").size == 0
        assert reader.read() == b""

    def test_append_starts_at_end(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"start")
        f = fs.open_file("/f.txt", os.O_WRONLY | os.O_APPEND)

        assert f.tell() == 5
        f.write(b"end")

        assert fs.read_file("/f.txt") == b"startend"

    def test_append_writes_never_overwrite(self):
        fs = MemoryFS()
        f = fs.open_file("/f.txt", os.O_RDWR | os.O_CREAT | os.O_APPEND)

        f.write(b"first")
        f.seek(0)
        f.write(b"second")

        assert fs.read_file("/f.txt") == b"firstsecond"

    def test_append_position_isolated_from_other_handle(self):
        """Seeks on another handle don't move the append handle."""
        fs = MemoryFS()
        appender = fs.open_file("/f.txt", os.O_WRONLY | os.O_CREAT | os.O_APPEND)
        other = fs.open_file("/f.txt", os.O_RDWR)

        appender.write(b"one")
        other.seek(0)
        appender.write(b"two")

        assert fs.read_file("/f.txt") == b"onetwo"
        assert other.tell() == 0


class TestHandleSharing:
    def test_writes_visible_to_other_handles(self):
        fs = MemoryFS()
        writer = fs.create("/f.txt")
        reader = fs.open("/f.txt")

        writer.write(b"shared")

        assert reader.read() == b"shared"
        assert fs.stat("/f.txt").size == 6

    def test_positions_are_independent(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"abcdef")
        a = fs.open("/f.txt")
        b = fs.open("/f.txt")

        a.read(4)

        assert a.tell() == 4
        assert b.tell() == 0
        assert b.read(2) == b"ab"

    def test_truncate_through_handle(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")
        f.write(b"abcdefgh")

        f.truncate(3)
        f.truncate(6)

        assert fs.read_file("/f.txt") == b"abc\x00\x00\x00"

    def test_handle_survives_rename(self):
        fs = MemoryFS()
        f = fs.create("/a.txt")
        fs.rename("/a.txt", "/b.txt")

        f.write(b"moved")

        assert fs.read_file("/b.txt") == b"moved"


class TestHandleClose:
    def test_second_close_raises(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")

        f.close()

        assert f.closed
        with pytest.raises(ValueError):
            f.close()

    @pytest.mark.parametrize(
        "op",
        [
            lambda f: f.read(),
            lambda f: f.read_at(1, 0),
            lambda f: f.write(b"x"),
            lambda f: f.write_at(b"x", 0),
            lambda f: f.seek(0),
            lambda f: f.tell(),
            lambda f: f.truncate(0),
            lambda f: f.stat(),
        ],
    )
    def test_operations_after_close_raise(self, op):
        fs = MemoryFS()
        f = fs.create("/f.txt")
        f.close()

        with pytest.raises(ValueError):
            op(f)

    def test_context_manager_closes(self):
        fs = MemoryFS()
        with fs.create("/f.txt") as f:
            f.write(b"x")
        assert f.closed

    def test_context_manager_after_explicit_close(self):
        fs = MemoryFS()
        with fs.create("/f.txt") as f:
            f.close()
        assert f.closed


class TestHandleLocking:
    def test_lock_unlock_are_noops(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")
        g = fs.create("/f.txt")

        assert f.lock() is None
        assert g.lock() is None
        assert f.unlock() is None
        assert g.unlock() is None


class TestHandleMtime:
    def test_write_updates_mtime(self):
        fs = MemoryFS()
        f = fs.create("/f.txt")
        before = fs.stat("/f.txt").mtime

        f.write(b"x")

        assert fs.stat("/f.txt").mtime >= before

    def test_open_does_not_touch_mtime(self):
        fs = MemoryFS()
        fs.write_file("/f.txt", b"x")
        before = fs.stat("/f.txt").mtime

        fs.open("/f.txt").read()
        fs.open_file("/f.txt", os.O_RDWR)

        assert fs.stat("/f.txt").mtime == before
