"""
Exceptions raised by the document detection and rectification pipeline
"""


class ScannerError(ValueError):
    """Base class for pipeline failures"""


class InvalidInputError(ScannerError):
    """The caller passed a missing, empty or malformed image or point list"""


class DegenerateGeometryError(ScannerError):
    """The corners describe a quadrilateral with no width or no height"""
