# -*- coding: utf-8 -*-
"""
The fixed layout elements of a DTED file, following MIL-PRF-89020B.

A DTED file is laid out as

    * the 80 byte User Header Label (UHL), see :class:`DTEDHeader`
    * the 648 byte Data Set Identification (DSI) record
    * the 2700 byte Accuracy Description (ACC) record
    * one data record per longitude line, see :class:`DTEDRecord`

Every element is big-endian. The header fields are ASCII, while the data
records are binary.
"""

import struct
from collections import OrderedDict
from typing import Optional

import numpy

from dtedpy.io.DEM.errors import DTEDParseError
from dtedpy.io.DEM.utils import take_bytes, parse_digits, from_signed_magnitude

__classification__ = "UNCLASSIFIED"
__author__ = "dtedpy developers"


#######
# module variables
UHL_TAG = b'UHL1'
HEADER_LENGTH = 80
RECORD_SENTINEL = 0xAA
_NOT_AVAILABLE = b'NA'
_HEMISPHERES = {
    b'N': False, b'E': False,
    b'S': True, b'W': True}


class BaseDTEDElement(object):
    """
    Base DTED element, decoded from a fixed position in a byte buffer.
    """

    __slots__ = ()

    @classmethod
    def from_bytes(cls, value, start):
        """
        Decode the element from `value`, beginning at index `start`.

        Parameters
        ----------
        value : bytes
        start : int

        Returns
        -------
        BaseDTEDElement

        Raises
        ------
        DTEDParseError
        """

        raise NotImplementedError

    def get_bytes_length(self):
        """
        The number of bytes this element occupies in the file.

        Returns
        -------
        int
        """

        raise NotImplementedError

    def to_json(self):
        """
        Serialize element to a json representation. This is intended to allow
        a simple presentation of the element.

        Returns
        -------
        dict
        """

        raise NotImplementedError


class Angle(BaseDTEDElement):
    """
    A degrees/minutes/seconds angle. The sign lives on the degrees, and the
    minutes and seconds are always non-negative.
    """

    __slots__ = ('_degrees', '_minutes', '_seconds', '_negative')
    _length = 8

    def __init__(self, deg, minutes=0, seconds=0, negative=None):
        """

        Parameters
        ----------
        deg : int
            The signed degree value.
        minutes : int
            In the range `[0, 59]`.
        seconds : int
            In the range `[0, 59]`.
        negative : None|bool
            The hemisphere sign. This is only required to express angles south
            or west with zero whole degrees, e.g. `000°30'00"W`. If `None`,
            then it is inferred from the sign of `deg`.
        """

        deg = int(deg)
        minutes = int(minutes)
        seconds = int(seconds)
        if not 0 <= minutes < 60:
            raise ValueError('minutes must be in the range [0, 59], got {}'.format(minutes))
        if not 0 <= seconds < 60:
            raise ValueError('seconds must be in the range [0, 59], got {}'.format(seconds))
        if negative is None:
            negative = deg < 0
        elif deg != 0 and (deg < 0) != bool(negative):
            raise ValueError(
                'negative={} is inconsistent with degree value {}'.format(negative, deg))
        self._degrees = abs(deg)
        self._minutes = minutes
        self._seconds = seconds
        self._negative = bool(negative)

    @property
    def deg(self):
        """
        int: The signed degree value.
        """

        return -self._degrees if self._negative else self._degrees

    @property
    def min(self):
        """
        int: The minutes.
        """

        return self._minutes

    @property
    def sec(self):
        """
        int: The seconds.
        """

        return self._seconds

    @property
    def negative(self):
        """
        bool: Is this angle south or west?
        """

        return self._negative

    def to_decimal_degrees(self):
        """
        Convert to decimal degrees.

        Returns
        -------
        float
        """

        result = self._degrees + self._minutes/60. + self._seconds/3600.
        return -result if self._negative else result

    def __float__(self):
        return self.to_decimal_degrees()

    def __eq__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return (self._degrees, self._minutes, self._seconds, self._negative) == \
            (other._degrees, other._minutes, other._seconds, other._negative)

    def __hash__(self):
        return hash((self._degrees, self._minutes, self._seconds, self._negative))

    def __repr__(self):
        return '{}({}, {}, {}, negative={})'.format(
            self.__class__.__name__, self.deg, self.min, self.sec, self.negative)

    def get_bytes_length(self):
        return self._length

    @classmethod
    def from_bytes(cls, value, start=0):
        """
        Decode from the 8 byte `DDDMMSSH` form, `H` being one of `N`, `S`, `E`, `W`.

        Parameters
        ----------
        value : bytes
        start : int

        Returns
        -------
        Angle
        """

        take_bytes(value, start, cls._length, 'angle')
        deg = parse_digits(value, start, 3, 'angle degrees')
        minutes = parse_digits(value, start+3, 2, 'angle minutes')
        seconds = parse_digits(value, start+5, 2, 'angle seconds')
        hemisphere = value[start+7:start+8]
        if hemisphere not in _HEMISPHERES:
            raise DTEDParseError(
                'Got hemisphere designator {!r}, expected one of N, S, E, W'.format(hemisphere), start+7)
        if minutes > 59 or seconds > 59:
            raise DTEDParseError(
                'Angle {!r} has minutes or seconds outside of [0, 59]'.format(
                    value[start:start+cls._length]), start)
        negative = _HEMISPHERES[hemisphere]
        return cls(-deg if negative else deg, minutes, seconds, negative=negative)

    def to_json(self):
        return OrderedDict([('deg', self.deg), ('min', self.min), ('sec', self.sec)])


class DTEDHeader(BaseDTEDElement):
    """
    The User Header Label (UHL) of a DTED file.
    """

    __slots__ = (
        '_origin_lon', '_origin_lat', '_lon_interval', '_lat_interval',
        '_accuracy', '_num_lon_lines', '_num_lat_lines')
    _length = HEADER_LENGTH

    def __init__(self, origin_lon, origin_lat, lon_interval, lat_interval,
                 accuracy, num_lon_lines, num_lat_lines):
        """

        Parameters
        ----------
        origin_lon : Angle
            Longitude of the south west corner.
        origin_lat : Angle
            Latitude of the south west corner.
        lon_interval : int
            Longitude post spacing, in tenths of an arcsecond.
        lat_interval : int
            Latitude post spacing, in tenths of an arcsecond.
        accuracy : None|int
            Absolute vertical accuracy in meters, `None` if not available.
        num_lon_lines : int
        num_lat_lines : int
        """

        if not isinstance(origin_lon, Angle) or not isinstance(origin_lat, Angle):
            raise TypeError('origin_lon and origin_lat must be Angle instances')
        self._origin_lon = origin_lon
        self._origin_lat = origin_lat
        self._lon_interval = _validate_uint16(lon_interval, 'lon_interval')
        self._lat_interval = _validate_uint16(lat_interval, 'lat_interval')
        self._accuracy = None if accuracy is None else _validate_uint16(accuracy, 'accuracy')
        self._num_lon_lines = _validate_uint16(num_lon_lines, 'num_lon_lines')
        self._num_lat_lines = _validate_uint16(num_lat_lines, 'num_lat_lines')

    @property
    def origin_lon(self):
        """
        Angle: The longitude of the south west corner.
        """

        return self._origin_lon

    @property
    def origin_lat(self):
        """
        Angle: The latitude of the south west corner.
        """

        return self._origin_lat

    @property
    def lon_interval(self):
        """
        int: The longitude spacing, in tenths of an arcsecond.
        """

        return self._lon_interval

    @property
    def lat_interval(self):
        """
        int: The latitude spacing, in tenths of an arcsecond.
        """

        return self._lat_interval

    @property
    def accuracy(self):
        # type: () -> Optional[int]
        """
        None|int: The absolute vertical accuracy, `None` if not available.
        """

        return self._accuracy

    @property
    def num_lon_lines(self):
        """
        int: The number of longitude lines, i.e. the number of data records.
        """

        return self._num_lon_lines

    @property
    def num_lat_lines(self):
        """
        int: The number of latitude lines, i.e. the number of posts per data record.
        """

        return self._num_lat_lines

    def get_bytes_length(self):
        return self._length

    @classmethod
    def from_bytes(cls, value, start=0):
        """
        Decode the 80 byte User Header Label. Only header content is consumed,
        the DSI and ACC records which follow are the caller's concern.

        Parameters
        ----------
        value : bytes
        start : int

        Returns
        -------
        DTEDHeader
        """

        tag = take_bytes(value, start, len(UHL_TAG), 'UHL tag')
        if tag != UHL_TAG:
            raise DTEDParseError(
                'Expected User Header Label tag {!r}, got {!r}'.format(UHL_TAG, tag), start)
        take_bytes(value, start, cls._length, 'User Header Label')

        origin_lon = Angle.from_bytes(value, start+4)
        origin_lat = Angle.from_bytes(value, start+12)
        lon_interval = parse_digits(value, start+20, 4, 'longitude interval')
        lat_interval = parse_digits(value, start+24, 4, 'latitude interval')
        accuracy = _parse_accuracy(value, start+28)
        # 15 reserved bytes at start+32
        num_lon_lines = parse_digits(value, start+47, 4, 'number of longitude lines')
        num_lat_lines = parse_digits(value, start+51, 4, 'number of latitude lines')
        # 25 reserved bytes at start+55
        return cls(origin_lon, origin_lat, lon_interval, lat_interval,
                   accuracy, num_lon_lines, num_lat_lines)

    def to_json(self):
        return OrderedDict([
            ('origin_lon', self.origin_lon.to_json()),
            ('origin_lat', self.origin_lat.to_json()),
            ('lon_interval', self.lon_interval),
            ('lat_interval', self.lat_interval),
            ('accuracy', self.accuracy),
            ('num_lon_lines', self.num_lon_lines),
            ('num_lat_lines', self.num_lat_lines)])


class DTEDRecord(BaseDTEDElement):
    """
    A single DTED data record, holding the posts of one longitude line,
    ordered south to north.
    """

    __slots__ = ('_block_count', '_lon_count', '_lat_count', '_elevations', '_checksum')

    def __init__(self, block_count, lon_count, lat_count, elevations, checksum=None):
        """

        Parameters
        ----------
        block_count : int
            The 24 bit data block sequence number.
        lon_count : int
            The longitude count echo.
        lat_count : int
            The latitude count echo.
        elevations : numpy.ndarray|list
            The elevation posts. A read-only copy is held, so later changes
            to the argument have no effect on the record.
        checksum : None|int
            The checksum as stored in the file.
        """

        if not 0 <= block_count < (1 << 24):
            raise ValueError('block_count must be an unsigned 24 bit integer, got {}'.format(block_count))
        self._block_count = int(block_count)
        self._lon_count = _validate_uint16(lon_count, 'lon_count')
        self._lat_count = _validate_uint16(lat_count, 'lat_count')
        elevations = numpy.array(elevations, dtype=numpy.int16, copy=True)
        if elevations.ndim != 1:
            raise ValueError('elevations must be one dimensional, got shape {}'.format(elevations.shape))
        elevations.flags.writeable = False
        self._elevations = elevations
        self._checksum = checksum

    @property
    def block_count(self):
        """
        int: The data block sequence number.
        """

        return self._block_count

    @property
    def lon_count(self):
        """
        int: The longitude count echo.
        """

        return self._lon_count

    @property
    def lat_count(self):
        """
        int: The latitude count echo.
        """

        return self._lat_count

    @property
    def elevations(self):
        """
        numpy.ndarray: The read-only int16 elevation posts, south to north.
        """

        return self._elevations

    @property
    def checksum(self):
        """
        None|int: The checksum stored with the record.
        """

        return self._checksum

    @staticmethod
    def record_length(num_lat_lines):
        """
        The number of bytes of a data record holding `num_lat_lines` posts.

        Parameters
        ----------
        num_lat_lines : int

        Returns
        -------
        int
        """

        return 8 + 2*num_lat_lines + 4

    def get_bytes_length(self):
        return self.record_length(self._elevations.size)

    @classmethod
    def from_bytes(cls, value, start, num_lat_lines=None, verify_checksum=False):
        """
        Decode a data record.

        Parameters
        ----------
        value : bytes
        start : int
        num_lat_lines : int
            The number of posts in the record, from the header.
        verify_checksum : bool
            Compare the stored checksum against the sum of the record bytes?

        Returns
        -------
        DTEDRecord
        """

        if num_lat_lines is None:
            raise ValueError('num_lat_lines is required for decoding a data record')

        sentinel = take_bytes(value, start, 1, 'data record sentinel')[0]
        if sentinel != RECORD_SENTINEL:
            raise DTEDParseError(
                'Expected data record sentinel 0x{:02x}, got 0x{:02x}'.format(RECORD_SENTINEL, sentinel),
                start)
        block_count = struct.unpack('>I', b'\x00' + take_bytes(value, start+1, 3, 'data block count'))[0]
        lon_count = struct.unpack('>H', take_bytes(value, start+4, 2, 'longitude count'))[0]
        lat_count = struct.unpack('>H', take_bytes(value, start+6, 2, 'latitude count'))[0]

        posts_start = start + 8
        raw = numpy.frombuffer(
            take_bytes(value, posts_start, 2*num_lat_lines, 'elevation posts'), dtype='>u2')
        elevations = from_signed_magnitude(raw)

        checksum_start = posts_start + 2*num_lat_lines
        checksum = struct.unpack('>I', take_bytes(value, checksum_start, 4, 'record checksum'))[0]
        if verify_checksum:
            calculated = int(numpy.frombuffer(
                value, dtype=numpy.uint8, count=checksum_start-start, offset=start).sum(dtype=numpy.uint64))
            calculated &= 0xFFFFFFFF
            if calculated != checksum:
                raise DTEDParseError(
                    'Data record checksum mismatch, stored {} but calculated {}'.format(checksum, calculated),
                    checksum_start)
        return cls(block_count, lon_count, lat_count, elevations, checksum=checksum)

    def to_json(self):
        return OrderedDict([
            ('block_count', self.block_count),
            ('lon_count', self.lon_count),
            ('lat_count', self.lat_count),
            ('num_posts', int(self.elevations.size)),
            ('checksum', self.checksum)])


def _validate_uint16(value, name):
    value = int(value)
    if not 0 <= value <= 0xFFFF:
        raise ValueError('{} must be an unsigned 16 bit integer, got {}'.format(name, value))
    return value


def _parse_accuracy(value, start):
    field = take_bytes(value, start, 4, 'accuracy')
    if field[:2] == _NOT_AVAILABLE:
        if field[2:] != b'  ':
            raise DTEDParseError('Malformed not-available accuracy field {!r}'.format(field), start)
        return None
    return parse_digits(value, start, 4, 'accuracy')
