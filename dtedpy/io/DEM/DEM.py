"""
Establish base expected functionality for digital elevation model handling.
"""

import numpy

from dtedpy.io.DEM.utils import argument_validation

__classification__ = "UNCLASSIFIED"
__author__ = "dtedpy developers"

_MINIMUM_BLOCK_SIZE = 50000


class DEMInterpolator(object):
    """
    Abstract DEM class presenting base required functionality. Heights may be
    requested relative to the geoid, as stored in DTED, or relative to the
    WGS-84 ellipsoid (HAE) where the implementation has a geoid model available.
    """

    __slots__ = ()

    def get_elevation_hae(self, lat, lon, block_size=50000):
        """
        Get the elevation value relative to the WGS-84 ellipsoid.

        Parameters
        ----------
        lat : numpy.ndarray|list|tuple|int|float
        lon : numpy.ndarray|list|tuple|int|float
        block_size : int|None
            See :meth:`get_elevation_geoid`.

        Returns
        -------
        float|numpy.ndarray
        """

        raise NotImplementedError

    def get_elevation_geoid(self, lat, lon, block_size=50000):
        """
        Get the elevation value relative to the geoid.

        Parameters
        ----------
        lat : numpy.ndarray|list|tuple|int|float
        lon : numpy.ndarray|list|tuple|int|float
        block_size : int|None
            If `None`, then the calculation proceeds as a single block. Otherwise
            the points are processed in blocks of this size, which is raised
            to 50,000 if smaller.

        Returns
        -------
        float|numpy.ndarray
            A float for scalar input, otherwise an array of the shape of `lat`.
        """

        raise NotImplementedError

    def get_max_hae(self, lat_lon_box=None):
        """
        Get the maximum elevation relative to the WGS-84 ellipsoid, possibly
        restricted to an area of interest.

        Parameters
        ----------
        lat_lon_box : None|numpy.ndarray|list|tuple
            `None`, or of the form `[lat min, lat max, lon min, lon max]`.

        Returns
        -------
        float
        """

        raise NotImplementedError

    def get_min_hae(self, lat_lon_box=None):
        """
        The minimum counterpart of :meth:`get_max_hae`.
        """

        raise NotImplementedError

    def get_max_geoid(self, lat_lon_box=None):
        """
        Get the maximum elevation relative to the geoid, possibly restricted
        to an area of interest.

        Parameters
        ----------
        lat_lon_box : None|numpy.ndarray|list|tuple
            `None`, or of the form `[lat min, lat max, lon min, lon max]`.

        Returns
        -------
        float
        """

        raise NotImplementedError

    def get_min_geoid(self, lat_lon_box=None):
        """
        The minimum counterpart of :meth:`get_max_geoid`.
        """

        raise NotImplementedError

    @staticmethod
    def _apply_in_blocks(function, lat, lon, block_size):
        """
        Evaluate `function(lat, lon)` over flattened coordinates, in blocks.

        Parameters
        ----------
        function : callable
            Maps equal length 1-d `lat, lon` arrays to a 1-d float array.
        lat : numpy.ndarray|list|tuple|int|float
        lon : numpy.ndarray|list|tuple|int|float
        block_size : None|int

        Returns
        -------
        float|numpy.ndarray
        """

        o_shape, lat, lon = argument_validation(lat, lon)

        if block_size is None:
            out = function(lat, lon)
        else:
            block_size = max(_MINIMUM_BLOCK_SIZE, int(block_size))
            out = numpy.full(lat.shape, numpy.nan, dtype=numpy.float64)
            start_block = 0
            while start_block < lat.size:
                end_block = min(lat.size, start_block + block_size)
                out[start_block:end_block] = function(
                    lat[start_block:end_block], lon[start_block:end_block])
                start_block = end_block

        if o_shape == ():
            return float(out[0])
        else:
            return numpy.reshape(out, o_shape)
