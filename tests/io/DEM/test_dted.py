import logging
import pathlib

import numpy
import pytest

from dtedpy.io.DEM.DTED import DTEDData, DTEDReader, decode, decode_header_only, read_dted, \
    read_dted_header, skip_metadata_blocks
from dtedpy.io.DEM.dted_elements import DTEDRecord
from dtedpy.io.DEM.errors import DTEDParseError

import tests
from .dted_builder import build_dted, build_header, build_large_dted, build_record, metadata_blocks

# Note
# set this for your storage of dted files
# export DTEDPY_TEST_PATH=<your dem stuff path>

test_data = tests.find_test_data_files(pathlib.Path(__file__).parent / "dted.json")

SPACING = 1/120.


def test_decode_small(small_grid, small_elevations):
    header = small_grid.header
    assert header.origin_lat.deg == -1
    assert header.origin_lon.deg == -70
    assert header.accuracy == 20
    assert small_grid.shape == (5, 4)
    assert len(small_grid.records) == 5
    assert [record.lon_count for record in small_grid.records] == [0, 1, 2, 3, 4]
    assert numpy.array_equal(small_grid.elevations, small_elevations)
    for record, row in zip(small_grid.records, small_elevations):
        assert record.elevations.tolist() == row.tolist()


def test_bounding_box(small_grid):
    assert small_grid.min_lat == -1.0
    assert small_grid.min_lon == -70.0
    assert small_grid.lat_interval == pytest.approx(SPACING)
    assert small_grid.lon_interval == pytest.approx(SPACING)
    assert small_grid.max_lat == pytest.approx(-1 + 3*SPACING)
    assert small_grid.max_lon == pytest.approx(-70 + 4*SPACING)
    assert small_grid.bounding_box == pytest.approx([-70, -70 + 4*SPACING, -1, -1 + 3*SPACING])
    assert small_grid.origin.tolist() == [-70.0, -1.0]


def test_grid_is_read_only(small_grid):
    with pytest.raises(ValueError):
        small_grid.elevations[0, 0] = 1
    with pytest.raises(ValueError):
        small_grid.records[2].elevations[0] = 1


def test_every_post_round_trips(small_grid):
    count = 0
    for lat, lon, elevation in small_grid.iter_posts():
        assert round(small_grid.get_elevation(lat, lon)) == elevation
        count += 1
    assert count == 20


def test_post_exact_at_origin(small_grid):
    assert small_grid.get_elevation(-1.0, -70.0) == 10.0


def test_outside_is_none(small_grid):
    eps = 1e-9
    assert small_grid.get_elevation(small_grid.min_lat - eps, small_grid.min_lon) is None
    assert small_grid.get_elevation(small_grid.max_lat + eps, small_grid.min_lon) is None
    assert small_grid.get_elevation(small_grid.min_lat, small_grid.min_lon - eps) is None
    assert small_grid.get_elevation(small_grid.min_lat, small_grid.max_lon + eps) is None
    assert small_grid.get_elevation(45.0, 15.0) is None
    assert small_grid.get_elevation(float('nan'), -70.0) is None


def test_max_corner(small_grid):
    value = small_grid.get_elevation(small_grid.max_lat, small_grid.max_lon)
    assert value is not None
    assert round(value) == 4000
    assert round(small_grid.get_elevation(small_grid.max_lat, small_grid.min_lon)) == 40
    assert round(small_grid.get_elevation(small_grid.min_lat, small_grid.max_lon)) == 1000


def test_bilinear_weights(small_grid):
    # center of the first cell averages its four corners
    assert small_grid.get_elevation(-1 + 0.5*SPACING, -70 + 0.5*SPACING) == pytest.approx(6.25)
    # quarter of the way east, half way north, in cell (2, 1)
    value = small_grid.get_elevation(-1 + 1.5*SPACING, -70 + 2.25*SPACING)
    assert value == pytest.approx(0.375*(110 + 120) + 0.125*(-7 + 7))


def test_get_elevations_matches_scalar(small_grid):
    lats = numpy.array([[-1 + 0.3*SPACING, -1 + 2.9*SPACING], [small_grid.max_lat, -2.0]])
    lons = numpy.array([[-70 + 3.7*SPACING, -70 + 0.1*SPACING], [small_grid.max_lon, -70.0]])
    values = small_grid.get_elevations(lats, lons)
    assert values.shape == (2, 2)
    assert numpy.isnan(values[1, 1])
    for index in [(0, 0), (0, 1), (1, 0)]:
        assert values[index] == pytest.approx(small_grid.get_elevation(lats[index], lons[index]))


def test_in_bounds(small_grid):
    mask = small_grid.in_bounds(numpy.array([-1.0, -0.5]), numpy.array([-70.0, -70.0]))
    assert mask.tolist() == [True, False]


def test_min_max(small_grid):
    assert small_grid.get_max() == 4000
    assert small_grid.get_min() == -7


def test_iteration_order(small_grid, small_elevations):
    posts = list(small_grid)
    assert len(posts) == 5*4
    for k, (lat, lon, elevation) in enumerate(posts):
        i, j = divmod(k, 4)
        assert (lat, lon) == small_grid.post_location(i, j)
        assert elevation == small_elevations[i, j]
        assert isinstance(elevation, int)
    # a fresh traversal starts from the first post again
    assert list(small_grid.iter_posts()) == posts


def test_post_location_range(small_grid):
    assert small_grid.post_location(0, 0) == (-1.0, -70.0)
    with pytest.raises(IndexError):
        small_grid.post_location(5, 0)


def test_data_constructor_validation(small_grid):
    with pytest.raises(ValueError):
        DTEDData(small_grid.header, small_grid.records[:4])
    rebuilt = DTEDData(small_grid.header, small_grid.records)
    assert numpy.array_equal(rebuilt.elevations, small_grid.elevations)
    short = DTEDRecord(0, 0, 0, [1, 2, 3])
    with pytest.raises(ValueError):
        DTEDData(small_grid.header, small_grid.records[:4] + (short, ))


def test_constructor_takes_only_records(small_grid):
    with pytest.raises(TypeError):
        DTEDData(small_grid.header, small_grid.records,
                 elevations=numpy.full(small_grid.shape, 999, dtype=numpy.int16))


def test_grid_owns_posts(small_grid, small_elevations):
    source = small_elevations.copy()
    records = [DTEDRecord(i, i, 0, source[i, :]) for i in range(source.shape[0])]
    data = DTEDData(small_grid.header, records)
    source[0, 0] = 1234
    assert data.get_elevation(data.min_lat, data.min_lon) == 10.0
    assert numpy.array_equal(data.elevations, small_elevations)
    for record, row in zip(data.records, data.elevations):
        assert numpy.array_equal(record.elevations, row)


def test_decode_header_only(small_bytes):
    header = decode_header_only(small_bytes[:80])
    assert header.to_json() == decode(small_bytes).header.to_json()


def test_wrong_tag(small_bytes):
    with pytest.raises(DTEDParseError) as info:
        decode(b'HDR1' + small_bytes[4:])
    assert info.value.position == 0
    with pytest.raises(DTEDParseError):
        decode_header_only(b'HDR1' + small_bytes[4:80])


def test_truncated_mid_record(small_bytes):
    record_length = DTEDRecord.record_length(4)
    truncated = small_bytes[:80 + 648 + 2700 + 2*record_length + 5]
    with pytest.raises(DTEDParseError) as info:
        decode(truncated)
    assert 'Truncated' in info.value.reason
    assert info.value.position >= 80 + 648 + 2700 + 2*record_length


def test_truncated_metadata(small_bytes):
    with pytest.raises(DTEDParseError) as info:
        decode(small_bytes[:500])
    assert 'Data Set Identification' in info.value.reason
    with pytest.raises(DTEDParseError) as info:
        skip_metadata_blocks(small_bytes[:2000], 80)
    assert 'Accuracy Description' in info.value.reason


def test_missing_record_sentinel(small_bytes):
    value = bytearray(small_bytes)
    offset = 80 + 648 + 2700 + DTEDRecord.record_length(4)
    value[offset] = 0x55
    with pytest.raises(DTEDParseError) as info:
        decode(bytes(value))
    assert info.value.position == offset


def test_checksum_opt_in(small_elevations):
    parts = [build_header(num_lon_lines=2, num_lat_lines=4), metadata_blocks(),
             build_record(0, small_elevations[0]), build_record(1, small_elevations[1], checksum=1)]
    value = b''.join(parts)
    assert decode(value).shape == (2, 4)
    with pytest.raises(DTEDParseError):
        decode(value, verify_checksum=True)


def test_checksum_verified(small_bytes):
    assert decode(small_bytes, verify_checksum=True).shape == (5, 4)


def test_trailing_bytes_ignored(small_bytes, small_elevations):
    assert numpy.array_equal(decode(small_bytes + b'\x00'*10).elevations, small_elevations)


def test_position_echo_mismatch_warns(small_elevations, caplog):
    parts = [build_header(num_lon_lines=2, num_lat_lines=4), metadata_blocks(),
             build_record(0, small_elevations[0]), build_record(7, small_elevations[1])]
    with caplog.at_level(logging.WARNING, logger='dtedpy.io.DEM.DTED'):
        data = decode(b''.join(parts))
    assert data.records[1].lon_count == 7
    assert 'longitude count' in caplog.text


@pytest.mark.parametrize('shape, kwargs', [
    ((1, 4), {}),
    ((4, 1), {}),
    ((2, 2), {'lat_interval': 0}),
    ((3, 3), {'lon_interval': 0}),
])
def test_degenerate_grid(shape, kwargs):
    elevations = numpy.arange(shape[0]*shape[1], dtype=numpy.int16).reshape(shape)
    data = decode(build_dted(elevations, **kwargs))
    assert data.shape == shape
    assert numpy.array_equal(data.elevations, elevations)
    assert data.get_elevation(data.min_lat, data.min_lon) is None
    assert data.get_elevation(data.max_lat, data.max_lon) is None
    assert numpy.all(numpy.isnan(data.get_elevations([data.min_lat, 0.0], [data.min_lon, 0.0])))
    posts = list(data)
    assert len(posts) == elevations.size
    assert posts[0] == (42.0, 15.0, 0)
    assert [post[2] for post in posts] == elevations.ravel().tolist()
    assert data.get_max() == elevations.size - 1


def test_empty_grid():
    data = decode(build_dted(numpy.zeros((0, 4), dtype=numpy.int16)))
    assert data.shape == (0, 4)
    assert data.records == ()
    assert list(data) == []
    assert data.get_elevation(42.0, 15.0) is None
    assert data.get_max() is None
    assert data.get_min() is None


def test_degenerate_grid_reader(tmp_path):
    file_name = str(tmp_path / 'n42_e015.dt2')
    with open(file_name, 'wb') as fi:
        fi.write(build_dted([[5, 7], [-3, 9]], lat_interval=0))
    reader = DTEDReader(file_name)
    assert reader.get_elevation_geoid(42.0, 15.0) == 0.0
    assert reader.get_max_geoid() == 9.0
    assert reader.get_min_geoid([41.5, 42.5, 14.5, 15.0]) == 5.0
    assert reader.get_max_geoid([42.5, 43.0, 14.5, 16.0]) == 0.0


def test_bytes_like_input(small_bytes):
    assert decode(bytearray(small_bytes)).shape == (5, 4)
    with pytest.raises(TypeError):
        decode(small_bytes.decode('latin-1'))


def test_full_size_tile():
    value, elevations = build_large_dted()
    for header in [decode_header_only(value[:80]), decode(value).header]:
        assert header.origin_lat.deg == 42
        assert header.origin_lat.min == 0
        assert header.origin_lat.sec == 0
        assert header.origin_lon.deg == 15
        assert header.origin_lon.min == 0
        assert header.origin_lon.sec == 0
        assert header.lat_interval == 10
        assert header.lon_interval == 10
        assert header.num_lat_lines == 3601
        assert header.num_lon_lines == 3601

    data = decode(value, verify_checksum=True)
    assert numpy.array_equal(data.elevations, elevations)
    assert data.max_lat == pytest.approx(43.0)
    assert data.max_lon == pytest.approx(16.0)
    assert round(data.get_elevation(42 + 1234/3600., 15 + 1800/3600.)) == -6
    assert round(data.get_elevation(data.max_lat, data.max_lon)) == -40


def test_read_files(tmp_path, small_bytes, small_elevations):
    file_name = str(tmp_path / 's01_w070.dt1')
    with open(file_name, 'wb') as fi:
        fi.write(small_bytes)
    assert numpy.array_equal(read_dted(file_name).elevations, small_elevations)
    assert read_dted_header(file_name).num_lon_lines == 5


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_dted(str(tmp_path / 'missing.dt2'))
    with pytest.raises(FileNotFoundError):
        read_dted_header(str(tmp_path / 'missing.dt2'))


class TestDTEDReader(object):
    @pytest.fixture
    def reader(self, tmp_path, small_bytes):
        file_name = str(tmp_path / 's01_w070.dt1')
        with open(file_name, 'wb') as fi:
            fi.write(small_bytes)
        return DTEDReader(file_name)

    def test_properties(self, reader, small_grid):
        assert reader.origin.tolist() == [-70.0, -1.0]
        assert reader.bounding_box == pytest.approx(small_grid.bounding_box)
        assert reader.data.shape == (5, 4)

    def test_get_elevation_geoid(self, reader, small_grid):
        lat = -1 + 1.5*SPACING
        lon = -70 + 2.25*SPACING
        value = reader.get_elevation_geoid(lat, lon)
        assert isinstance(value, float)
        assert value == pytest.approx(small_grid.get_elevation(lat, lon))
        # outside of the file is mean sea level
        assert reader.get_elevation_geoid(10.0, 10.0) == 0.0
        values = reader.get_elevation_geoid([lat, 10.0], [lon, 10.0], block_size=None)
        assert values == pytest.approx([small_grid.get_elevation(lat, lon), 0.0])

    def test_min_max_geoid(self, reader):
        assert reader.get_max_geoid() == 4000
        assert reader.get_min_geoid() == -7
        box = [-1, -1 + 3*SPACING, -70, -70 + 0.5*SPACING]
        assert reader.get_max_geoid(box) == 40
        assert reader.get_min_geoid(box) == -5
        assert reader.get_max_geoid([10, 11, 10, 11]) == 0.0

    def test_hae_unavailable(self, reader):
        with pytest.raises(NotImplementedError):
            reader.get_elevation_hae(-1.0, -70.0)


@pytest.mark.skipif(not test_data["dted_files"], reason="DTED test data does not exist")
def test_input_data():
    data = read_dted(test_data["dted_files"][0])
    assert data.header.origin_lat.deg == 42
    assert data.header.origin_lat.min == 0
    assert data.header.origin_lat.sec == 0
    assert data.header.origin_lon.deg == 15
    assert data.header.origin_lon.min == 0
    assert data.header.origin_lon.sec == 0
    assert data.header.lat_interval == 10
    assert data.header.lon_interval == 10
    assert data.header.num_lat_lines == 3601
    assert data.header.num_lon_lines == 3601


@pytest.mark.skipif(not test_data["dted_files"], reason="DTED test data does not exist")
def test_read_header_only():
    header = read_dted_header(test_data["dted_files"][0])
    assert header.origin_lat.deg == 42
    assert header.origin_lon.deg == 15
    assert header.lat_interval == 10
    assert header.lon_interval == 10
    assert header.num_lat_lines == 3601
    assert header.num_lon_lines == 3601
