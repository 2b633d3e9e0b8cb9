"""
Exceptions raised while decoding DTED content.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "dtedpy developers"


class DTEDError(Exception):
    """A custom base exception class for the dtedpy package."""


class DTEDParseError(DTEDError, ValueError):
    """
    Raised when the bytes presented do not follow the DTED layout. The decode
    is abandoned at the first such problem.
    """

    def __init__(self, reason, position):
        """

        Parameters
        ----------
        reason : str
            Description of the problem.
        position : int
            The byte offset, relative to the start of the decoded buffer,
            at which the problem was found.
        """

        self.reason = reason
        self.position = int(position)
        super(DTEDParseError, self).__init__('{} (at byte {})'.format(reason, self.position))

    def __reduce__(self):
        return self.__class__, (self.reason, self.position)
