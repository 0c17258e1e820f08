import pytest
import taichi as ti

import region_map_buffer
from region_map_session import Session


@pytest.fixture(scope="session", autouse=True)
def taichi_cpu():
    region_map_buffer.init(arch=ti.cpu)


@pytest.fixture
def session():
    s = Session()
    yield s
    s.close()
