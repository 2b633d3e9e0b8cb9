"""
Low level helpers shared by the DTED decoders and interpolators.
"""

import numpy

from dtedpy.io.DEM.errors import DTEDParseError

__author__ = "dtedpy developers"
__classification__ = "UNCLASSIFIED"

_SIGN_BIT = 0x8000
_MAGNITUDE_MASK = 0x7FFF


def argument_validation(lat, lon):
    if not isinstance(lat, numpy.ndarray):
        lat = numpy.array(lat, dtype=numpy.float64)
    if not isinstance(lon, numpy.ndarray):
        lon = numpy.array(lon, dtype=numpy.float64)
    if lat.shape != lon.shape:
        raise ValueError(
            'lat and lon must have the same shape, got '
            'lat.shape = {}, lon.shape = {}'.format(lat.shape, lon.shape))
    o_shape = lat.shape
    lat = numpy.reshape(lat, (-1,))
    lon = numpy.reshape(lon, (-1,))

    return o_shape, lat, lon


def ensure_bytes(value):
    """
    Ensure that the decoder input is a bytes object.

    Parameters
    ----------
    value : bytes|bytearray|memoryview

    Returns
    -------
    bytes
    """

    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise TypeError('Input is required to be bytes. Got type {}'.format(type(value)))


def take_bytes(value, start, length, name):
    """
    Extract the `length` bytes beginning at `start`, failing if the buffer
    is too short.

    Parameters
    ----------
    value : bytes
    start : int
    length : int
    name : str
        The field name, for the error message.

    Returns
    -------
    bytes

    Raises
    ------
    DTEDParseError
    """

    end = start + length
    if end > len(value):
        raise DTEDParseError(
            'Truncated input, {} requires {} bytes but only {} '
            'remain'.format(name, length, max(0, len(value) - start)), start)
    return value[start:end]


def parse_digits(value, start, length, name):
    """
    Interpret a fixed width field of ASCII digits as an unsigned integer.

    Parameters
    ----------
    value : bytes
    start : int
    length : int
    name : str

    Returns
    -------
    int

    Raises
    ------
    DTEDParseError
        For truncated input, or any byte outside of `0-9`.
    """

    field = take_bytes(value, start, length, name)
    result = 0
    for i, entry in enumerate(field):
        if not 0x30 <= entry <= 0x39:
            raise DTEDParseError(
                'Non-digit character {!r} in {} field {!r}'.format(
                    bytes([entry]), name, field), start + i)
        result = 10*result + (entry - 0x30)
    return result


def from_signed_magnitude(value):
    """
    Convert 16 bit signed-magnitude values to signed integers. Bit 15 is the
    sign flag and bits 14-0 are the absolute value, so this is **not** the
    two's-complement interpretation. Note that `0x8000` (negative zero) maps
    to `0`.

    Parameters
    ----------
    value : int|numpy.ndarray
        The raw unsigned 16 bit value(s).

    Returns
    -------
    int|numpy.ndarray
        A python int for scalar input, otherwise an int16 array of the same shape.
    """

    if isinstance(value, numpy.ndarray):
        raw = value.astype(numpy.uint16)
        magnitude = (raw & _MAGNITUDE_MASK).astype(numpy.int16)
        return numpy.where((raw & _SIGN_BIT) != 0, -magnitude, magnitude).astype(numpy.int16)

    value = int(value)
    if not 0 <= value <= 0xFFFF:
        raise ValueError('Got value {}, which is not an unsigned 16 bit integer'.format(value))
    magnitude = value & _MAGNITUDE_MASK
    return -magnitude if value & _SIGN_BIT else magnitude
