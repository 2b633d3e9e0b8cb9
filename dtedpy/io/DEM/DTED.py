# -*- coding: utf-8 -*-
"""
Classes and methods for decoding and using digital elevation models in DTED format.

Decoding is a single pass over a byte buffer, producing a read-only
:class:`DTEDData` grid which may be shared freely between callers.
"""

import logging
import math

import numpy

from dtedpy.io.DEM.DEM import DEMInterpolator
from dtedpy.io.DEM.dted_elements import DTEDHeader, DTEDRecord, HEADER_LENGTH
from dtedpy.io.DEM.errors import DTEDParseError
from dtedpy.io.DEM.utils import argument_validation, ensure_bytes, take_bytes

logger = logging.getLogger(__name__)

__classification__ = "UNCLASSIFIED"
__author__ = "dtedpy developers"


#######
# module variables
DSI_LENGTH = 648
ACC_LENGTH = 2700
TENTHS_ARCSECOND_PER_DEGREE = 36000.


class DTEDData(object):
    """
    A complete, rectangular DTED elevation grid. Records are ordered west to
    east, and the posts of each record south to north, so that
    `elevations[i, j]` is the post at longitude index `i` and latitude index `j`.

    The grid is never modified after construction.
    """

    __slots__ = (
        '_header', '_records', '_elevations', '_min_lat', '_min_lon',
        '_lat_interval', '_lon_interval', '_max_lat', '_max_lon', '_can_interpolate')

    def __init__(self, header, records):
        """

        Parameters
        ----------
        header : DTEDHeader
        records : list|tuple
            The :class:`DTEDRecord` collection, one per longitude line. The
            elevation grid is assembled as a fresh copy of the record posts.
        """

        if not isinstance(header, DTEDHeader):
            raise TypeError('header must be a DTEDHeader instance, got type {}'.format(type(header)))

        records = tuple(records)
        if len(records) != header.num_lon_lines:
            raise ValueError(
                'The header specifies {} longitude lines, but {} records were '
                'provided'.format(header.num_lon_lines, len(records)))
        for i, record in enumerate(records):
            if not isinstance(record, DTEDRecord):
                raise TypeError('Record {} is not a DTEDRecord instance, got type {}'.format(i, type(record)))
            if record.elevations.size != header.num_lat_lines:
                raise ValueError(
                    'Record {} has {} posts, but the header specifies {} latitude '
                    'lines'.format(i, record.elevations.size, header.num_lat_lines))

        if len(records) == 0:
            elevations = numpy.empty((0, header.num_lat_lines), dtype=numpy.int16)
        else:
            # stack always allocates, so the grid is owned by this instance
            elevations = numpy.stack([record.elevations for record in records])
        elevations.flags.writeable = False

        self._header = header
        self._records = records
        self._elevations = elevations
        self._min_lat = header.origin_lat.to_decimal_degrees()
        self._min_lon = header.origin_lon.to_decimal_degrees()
        self._lat_interval = header.lat_interval/TENTHS_ARCSECOND_PER_DEGREE
        self._lon_interval = header.lon_interval/TENTHS_ARCSECOND_PER_DEGREE
        self._max_lat = self._min_lat + self._lat_interval*(header.num_lat_lines - 1)
        self._max_lon = self._min_lon + self._lon_interval*(header.num_lon_lines - 1)
        # interpolation requires at least one complete cell with non-zero extent
        self._can_interpolate = (
            header.num_lon_lines >= 2 and header.num_lat_lines >= 2 and
            header.lon_interval > 0 and header.lat_interval > 0)

    @property
    def header(self):
        """
        DTEDHeader: The user header label.
        """

        return self._header

    @property
    def records(self):
        """
        Tuple[DTEDRecord]: The data records, west to east.
        """

        return self._records

    @property
    def elevations(self):
        """
        numpy.ndarray: The read-only int16 grid of shape `(num_lon_lines, num_lat_lines)`.
        """

        return self._elevations

    @property
    def shape(self):
        """
        Tuple[int, int]: The grid shape, `(num_lon_lines, num_lat_lines)`.
        """

        return self._elevations.shape

    @property
    def min_lat(self):
        """
        float: The southern edge, in decimal degrees.
        """

        return self._min_lat

    @property
    def max_lat(self):
        """
        float: The northern edge, in decimal degrees.
        """

        return self._max_lat

    @property
    def min_lon(self):
        """
        float: The western edge, in decimal degrees.
        """

        return self._min_lon

    @property
    def max_lon(self):
        """
        float: The eastern edge, in decimal degrees.
        """

        return self._max_lon

    @property
    def lat_interval(self):
        """
        float: The latitude post spacing, in decimal degrees.
        """

        return self._lat_interval

    @property
    def lon_interval(self):
        """
        float: The longitude post spacing, in decimal degrees.
        """

        return self._lon_interval

    @property
    def origin(self):
        """
        numpy.ndarray: The origin of this DTED, of the form `[longitude, latitude]`.
        """

        return numpy.array([self._min_lon, self._min_lat], dtype=numpy.float64)

    @property
    def bounding_box(self):
        """
        numpy.ndarray: The bounding box of the form
        `[longitude min, longitude max, latitude min, latitude max]`.
        """

        return numpy.array(
            [self._min_lon, self._max_lon, self._min_lat, self._max_lat], dtype=numpy.float64)

    def post_location(self, lon_index, lat_index):
        """
        Gets the location of the given post.

        Parameters
        ----------
        lon_index : int
        lat_index : int

        Returns
        -------
        (float, float)
            Of the form `(lat, lon)`.
        """

        if not (0 <= lon_index < self._header.num_lon_lines and 0 <= lat_index < self._header.num_lat_lines):
            raise IndexError('Post index ({}, {}) is outside of the grid {}'.format(
                lon_index, lat_index, self.shape))
        return self._min_lat + lat_index*self._lat_interval, self._min_lon + lon_index*self._lon_interval

    def in_bounds(self, lat, lon):
        """
        Determine which of the given points are inside the extent of this DTED.
        The boundary is included.

        Parameters
        ----------
        lat : numpy.ndarray|float
        lon : numpy.ndarray|float

        Returns
        -------
        numpy.ndarray|bool
            boolean array of the same shape as lat/lon
        """

        return (lon >= self._min_lon) & (lon <= self._max_lon) & \
               (lat >= self._min_lat) & (lat <= self._max_lat)

    @staticmethod
    def _split_position(position, num_lines):
        index = int(math.floor(position))
        fraction = position - index
        if index >= num_lines - 1:
            # the last line has no eastern/northern neighbor, so use the final cell
            index -= 1
            fraction += 1.0
        return index, fraction

    def get_elevation(self, lat, lon):
        """
        Bilinearly interpolate the elevation at a single point. This is relative
        to the EGM96 geoid by DTED specification. A point which falls exactly
        on a post yields the stored value for that post.

        Parameters
        ----------
        lat : float
        lon : float

        Returns
        -------
        None|float
            `None` if the point is outside of the grid, or if the grid
            has fewer than two lines or zero post spacing on either axis, so that
            no interpolation cell exists.
        """

        lat = float(lat)
        lon = float(lon)
        if not (self._can_interpolate and self.in_bounds(lat, lon)):
            return None

        lat_index, lat_frac = self._split_position(
            (lat - self._min_lat)/self._lat_interval, self._header.num_lat_lines)
        lon_index, lon_frac = self._split_position(
            (lon - self._min_lon)/self._lon_interval, self._header.num_lon_lines)

        grid = self._elevations
        return float(
            (1 - lon_frac)*(1 - lat_frac)*grid[lon_index, lat_index] +
            (1 - lon_frac)*lat_frac*grid[lon_index, lat_index + 1] +
            lon_frac*(1 - lat_frac)*grid[lon_index + 1, lat_index] +
            lon_frac*lat_frac*grid[lon_index + 1, lat_index + 1])

    def _interpolate(self, lat, lon):
        # type: (numpy.ndarray, numpy.ndarray) -> numpy.ndarray
        # we implicitly require that lat/lon are contained in this DTED
        fx = (lon - self._min_lon)/self._lon_interval
        fy = (lat - self._min_lat)/self._lat_interval

        ix = numpy.minimum(numpy.floor(fx).astype(numpy.int64), self._header.num_lon_lines - 2)
        iy = numpy.minimum(numpy.floor(fy).astype(numpy.int64), self._header.num_lat_lines - 2)
        dx = fx - ix
        dy = fy - iy

        grid = self._elevations
        return (1 - dx)*(1 - dy)*grid[ix, iy] + (1 - dx)*dy*grid[ix, iy + 1] + \
            dx*(1 - dy)*grid[ix + 1, iy] + dx*dy*grid[ix + 1, iy + 1]

    def get_elevations(self, lat, lon):
        """
        Bilinearly interpolate the elevation at many points.

        Parameters
        ----------
        lat : numpy.ndarray|list|tuple|float
        lon : numpy.ndarray|list|tuple|float

        Returns
        -------
        numpy.ndarray
            Elevation values of the same shape as lat/lon, with `NaN` for
            points outside of the grid, or everywhere if the grid has no
            interpolation cell.
        """

        o_shape, lat, lon = argument_validation(lat, lon)

        out = numpy.full(lat.shape, numpy.nan, dtype=numpy.float64)
        if not self._can_interpolate:
            return numpy.reshape(out, o_shape)
        boolc = self.in_bounds(lat, lon)
        if numpy.any(boolc):
            out[boolc] = self._interpolate(lat[boolc], lon[boolc])
        return numpy.reshape(out, o_shape)

    def get_max(self):
        """
        Gets the maximum stored post value.

        Returns
        -------
        None|int
            `None` for a grid without posts.
        """

        if self._elevations.size == 0:
            return None
        return int(numpy.max(self._elevations))

    def get_min(self):
        """
        Gets the minimum stored post value.

        Returns
        -------
        None|int
            `None` for a grid without posts.
        """

        if self._elevations.size == 0:
            return None
        return int(numpy.min(self._elevations))

    def iter_posts(self):
        """
        Iterate over every post, longitude major and latitude minor, which
        matches the order of the data records. Each call starts afresh.

        Yields
        ------
        (float, float, int)
            Of the form `(lat, lon, elevation)`.
        """

        for i in range(self._header.num_lon_lines):
            lon = self._min_lon + i*self._lon_interval
            row = self._elevations[i]
            for j in range(self._header.num_lat_lines):
                yield self._min_lat + j*self._lat_interval, lon, int(row[j])

    def __iter__(self):
        return self.iter_posts()


def skip_metadata_blocks(value, start):
    """
    Skip the Data Set Identification and Accuracy Description records which
    follow the user header label. Their contents are not interpreted.

    Parameters
    ----------
    value : bytes
    start : int
        The offset immediately following the user header label.

    Returns
    -------
    int
        The offset of the first data record.
    """

    take_bytes(value, start, DSI_LENGTH, 'Data Set Identification record')
    take_bytes(value, start + DSI_LENGTH, ACC_LENGTH, 'Accuracy Description record')
    return start + DSI_LENGTH + ACC_LENGTH


def decode_header_only(value):
    """
    Decode only the user header label. Only the first 80 bytes of the file
    are required.

    Parameters
    ----------
    value : bytes|bytearray|memoryview

    Returns
    -------
    DTEDHeader

    Raises
    ------
    DTEDParseError
    """

    return DTEDHeader.from_bytes(ensure_bytes(value), 0)


def decode(value, verify_checksum=False):
    """
    Decode the complete contents of a DTED file.

    Parameters
    ----------
    value : bytes|bytearray|memoryview
        The entire file contents.
    verify_checksum : bool
        Verify the checksum of each data record? This is not required for
        a successful decode, and is off by default.

    Returns
    -------
    DTEDData

    Raises
    ------
    DTEDParseError
        On the first deviation from the DTED layout. No partial grid is returned.
    """

    value = ensure_bytes(value)
    header = DTEDHeader.from_bytes(value, 0)
    logger.debug('Decoded DTED header {}'.format(header.to_json()))

    num_lon_lines = header.num_lon_lines
    num_lat_lines = header.num_lat_lines
    offset = skip_metadata_blocks(value, header.get_bytes_length())
    record_length = DTEDRecord.record_length(num_lat_lines)

    records = []
    echo_mismatches = 0
    for i in range(num_lon_lines):
        record = DTEDRecord.from_bytes(
            value, offset, num_lat_lines, verify_checksum=verify_checksum)
        if record.lon_count != i:
            echo_mismatches += 1
        records.append(record)
        offset += record_length

    if echo_mismatches > 0:
        logger.warning(
            'Got {} data records whose longitude count does not match their position '
            'in the file. The records are used in file order.'.format(echo_mismatches))
    if offset < len(value):
        logger.debug('Ignoring {} bytes following the final data record'.format(len(value) - offset))
    return DTEDData(header, records)


def read_dted(file_name, verify_checksum=False):
    """
    Read and decode a DTED file.

    Parameters
    ----------
    file_name : str
    verify_checksum : bool

    Returns
    -------
    DTEDData
    """

    with open(file_name, 'rb') as fi:
        content = fi.read()
    logger.info('Read {} bytes from DTED file {}'.format(len(content), file_name))
    return decode(content, verify_checksum=verify_checksum)


def read_dted_header(file_name):
    """
    Read and decode only the user header label of a DTED file.

    Parameters
    ----------
    file_name : str

    Returns
    -------
    DTEDHeader
    """

    with open(file_name, 'rb') as fi:
        content = fi.read(HEADER_LENGTH)
    return decode_header_only(content)


class DTEDReader(DEMInterpolator):
    """
    DEM Interpolator backed by a single, fully decoded DTED file. Points outside
    of the file are assumed to be at mean sea level.
    """

    __slots__ = ('_file_name', '_data')

    def __init__(self, file_name, verify_checksum=False):
        """

        Parameters
        ----------
        file_name : str
        verify_checksum : bool
        """

        self._file_name = file_name
        self._data = read_dted(file_name, verify_checksum=verify_checksum)

    @property
    def file_name(self):
        """
        str: The DTED file name.
        """

        return self._file_name

    @property
    def data(self):
        """
        DTEDData: The decoded grid.
        """

        return self._data

    @property
    def origin(self):
        """
        numpy.ndarray: The origin of this DTED, of the form `[longitude, latitude]`.
        """

        return self._data.origin

    @property
    def bounding_box(self):
        """
        numpy.ndarray: The bounding box of the form
        `[longitude min, longitude max, latitude min, latitude max]`.
        """

        return self._data.bounding_box

    def _get_elevation_geoid(self, lat, lon):
        out = self._data.get_elevations(lat, lon)
        missing = numpy.isnan(out)
        if numpy.any(missing):
            logger.warning(
                'Got {} points outside of DTED file {}, using mean sea level '
                'for these'.format(int(numpy.sum(missing)), self._file_name))
            out[missing] = 0.0
        return out

    def get_elevation_geoid(self, lat, lon, block_size=50000):
        return self._apply_in_blocks(self._get_elevation_geoid, lat, lon, block_size)

    @staticmethod
    def _axis_overlap(low, high, minimum, interval, num_lines):
        if num_lines == 0:
            return None
        if interval == 0:
            # every line sits at the minimum
            return slice(0, num_lines, 1) if low <= minimum <= high else None
        first = (low - minimum)/interval
        last = (high - minimum)/interval
        if first > num_lines - 1 or last < 0:
            return None
        first = int(max(0, numpy.floor(first)))
        last = int(min(num_lines, numpy.ceil(last) + 1))
        return slice(first, last, 1)

    def _find_overlap(self, lat_lon_box):
        """
        Gets the overlap slice argument for the lat/lon bounding box.

        Parameters
        ----------
        lat_lon_box : None|numpy.ndarray|list|tuple
            Of the form `[lat min, lat max, lon min, lon max]`.

        Returns
        -------
        None|(slice, slice)
        """

        num_lon, num_lat = self._data.shape
        if num_lon == 0 or num_lat == 0:
            return None
        if lat_lon_box is None:
            return slice(0, num_lon, 1), slice(0, num_lat, 1)

        rows = self._axis_overlap(
            lat_lon_box[2], lat_lon_box[3], self._data.min_lon, self._data.lon_interval, num_lon)
        cols = self._axis_overlap(
            lat_lon_box[0], lat_lon_box[1], self._data.min_lat, self._data.lat_interval, num_lat)
        if rows is None or cols is None:
            return None
        return rows, cols

    def get_max_geoid(self, lat_lon_box=None):
        arg = self._find_overlap(lat_lon_box)
        if arg is None:
            return 0.0
        return float(numpy.max(self._data.elevations[arg]))

    def get_min_geoid(self, lat_lon_box=None):
        arg = self._find_overlap(lat_lon_box)
        if arg is None:
            return 0.0
        return float(numpy.min(self._data.elevations[arg]))
