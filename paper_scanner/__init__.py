"""
Paper Scanner - finds a document in a photo and flattens it into a scan
"""

__version__ = "1.0.0"

from .corners import Corners, Point
from .document import (
    MAX_CANDIDATES,
    detect_document,
    enhance_document,
    four_point_transform,
    order_points,
    rectify_and_enhance
)
from .errors import DegenerateGeometryError, InvalidInputError, ScannerError
from .scanner import DocumentScanner, main

__all__ = [
    'Corners',
    'Point',
    'MAX_CANDIDATES',
    'detect_document',
    'enhance_document',
    'four_point_transform',
    'order_points',
    'rectify_and_enhance',
    'DegenerateGeometryError',
    'InvalidInputError',
    'ScannerError',
    'DocumentScanner',
    'main'
]
