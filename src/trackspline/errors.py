"""
Exceptions raised by trackspline.
"""


class TrackSplineError(Exception):
    """Base class for all trackspline errors."""


class ExportError(TrackSplineError, ValueError):
    """Invalid geometry, threshold or export data.

    Raised before anything is appended or written, since a partially
    exported chain is unusable downstream.
    """
