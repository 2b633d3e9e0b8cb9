"""
Digital elevation model handling, centered on the DTED format.
"""

__classification__ = "UNCLASSIFIED"
