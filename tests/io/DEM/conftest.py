import numpy
import pytest

from dtedpy.io.DEM.DTED import decode

from .dted_builder import build_dted


@pytest.fixture
def small_elevations():
    # 5 longitude lines by 4 latitude lines, including negative values
    return numpy.array([
        [10, 20, 30, 40],
        [-5, 0, 15, 25],
        [100, 110, 120, 130],
        [7, -7, 7, -7],
        [1000, 2000, 3000, 4000]], dtype=numpy.int16)


@pytest.fixture
def small_bytes(small_elevations):
    # origin S01 W070, 30 arcsecond spacing
    return build_dted(small_elevations, origin_lon=b'0700000W', origin_lat=b'0010000S',
                      lon_interval=300, lat_interval=300, accuracy=b'0020')


@pytest.fixture
def small_grid(small_bytes):
    return decode(small_bytes)
