import numpy as np
import pytest

import region_map_config as C
from region_map_buffer import TaichiBackend
from region_map_errors import RegionInvariantError
from region_map_mesh import Mesh


@pytest.fixture
def backend():
    return TaichiBackend()


def test_fill_upload_download(backend):
    buf = backend.allocate(5)
    try:
        backend.fill(buf, 3)
        assert list(backend.download(buf)) == [3] * 5
        backend.upload(np.arange(5), buf)
        assert list(backend.download(buf)) == [0, 1, 2, 3, 4]
        backend.write_byte(buf, 2, 200)
        assert backend.read_byte(buf, 2) == 200
    finally:
        backend.release(buf)


def test_upload_length_mismatch(backend):
    buf = backend.allocate(5)
    try:
        with pytest.raises(RegionInvariantError):
            backend.upload(np.zeros(4), buf)
    finally:
        backend.release(buf)


def test_use_after_release(backend):
    buf = backend.allocate(5)
    backend.release(buf)
    with pytest.raises(RegionInvariantError):
        backend.fill(buf, 0)
    with pytest.raises(RegionInvariantError):
        backend.release(buf)


@pytest.mark.parametrize("dx, expected", [(2, [9, 9, 1, 2, 3]), (-1, [2, 3, 4, 5, 9])])
def test_shift_window(backend, dx, expected):
    mesh = Mesh(5, 1, 1, 1.0, 1.0, 1.0)
    src = backend.allocate(5)
    dst = backend.allocate(5)
    try:
        backend.upload(np.array([1, 2, 3, 4, 5]), src)
        backend.shift_window(dst, src, mesh, C.X, dx, 9)
        assert list(backend.download(dst)) == expected
        assert list(backend.download(src)) == [1, 2, 3, 4, 5]
    finally:
        backend.release(src)
        backend.release(dst)


def test_shift_window_z(backend):
    mesh = Mesh(2, 1, 3, 1.0, 1.0, 1.0)
    src = backend.allocate(6)
    dst = backend.allocate(6)
    try:
        backend.upload(np.array([1, 2, 3, 4, 5, 6]), src)
        backend.shift_window(dst, src, mesh, C.Z, 1, 0)
        assert list(backend.download(dst)) == [0, 0, 1, 2, 3, 4]
    finally:
        backend.release(src)
        backend.release(dst)
