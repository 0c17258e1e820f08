import numpy as np
import pytest

from region_map_decode import RegionParam, as_lut, unit_map
from region_map_errors import RegionConfigError
from region_map_shapes import XRange


def test_unit_map_is_identity():
    lut = unit_map().lut()
    assert lut.shape == (256,)
    assert np.array_equal(lut, np.arange(256, dtype=np.float32))


def test_region_param_table():
    msat = RegionParam("Msat", "A/m", default=1.0)
    msat.set_region(3, 800e3)
    assert msat.get_region(3) == 800e3
    assert msat.get_region(0) == 1.0
    with pytest.raises(RegionConfigError):
        msat.set_region(256, 1.0)
    with pytest.raises(RegionConfigError):
        msat.set_region(1, [1.0, 2.0])


def test_vector_region_param():
    anis = RegionParam("anisU", ncomp=3)
    anis.set_region(2, [0, 0, 1])
    assert np.array_equal(anis.get_region(2), [0, 0, 1])
    assert anis.lut().shape == (256, 3)
    with pytest.raises(RegionConfigError):
        anis.set_region(2, [1, 2])


def test_as_lut_rejects_wrong_length():
    with pytest.raises(RegionConfigError):
        as_lut(np.zeros(10))


def test_output_is_ids_as_float(session):
    session.set_mesh(4, 2, 1, 1.0, 1.0, 1.0)
    session.regions.define_region(6, XRange(hi=2))
    out = session.regions.output()
    assert out.dtype == np.float32
    assert out.shape == (1, 2, 4)
    assert np.array_equal(out, session.regions.host_array().astype(np.float32))


def test_decode_property_table(session):
    session.set_mesh(4, 2, 1, 1.0, 1.0, 1.0)
    session.regions.define_region(1, XRange(hi=1))
    msat = RegionParam("Msat", "A/m", default=1.0)
    msat.set_region(1, 800e3)
    before = session.regions.host_list()
    field = session.regions.decode(msat)
    assert np.all(field[0, :, 0] == 800e3)
    assert np.all(field[0, :, 1:] == 1.0)
    assert np.array_equal(session.regions.host_list(), before)


def test_decode_vector_table(session):
    session.set_mesh(2, 1, 1, 1.0, 1.0, 1.0)
    session.regions.define_cell(1, 1, 0, 0)
    table = np.zeros((256, 3), dtype=np.float32)
    table[1] = [0, 0, 1]
    field = session.regions.decode(table)
    assert field.shape == (1, 1, 2, 3)
    assert np.array_equal(field[0, 0, 0], [0, 0, 0])
    assert np.array_equal(field[0, 0, 1], [0, 0, 1])
