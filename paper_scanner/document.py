"""
Document processing module
Handles document detection, perspective correction and contrast enhancement
"""

import logging
from typing import List, Optional, Tuple

import cv2
import imutils
import numpy as np

from .corners import Corners, as_image_size, as_point_array
from .errors import DegenerateGeometryError, InvalidInputError
from .utils import image_size, to_grayscale, validate_image

logger = logging.getLogger(__name__)

# Edge extraction
BLUR_KERNEL_SIZE = (5, 5)
THRESHOLD_LOWER_BOUND = 20
THRESHOLD_MAX_VALUE = 255
CANNY_LOW_THRESHOLD = 75
CANNY_HIGH_THRESHOLD = 200
DILATE_KERNEL_SIZE = (9, 9)

# Candidate selection
MAX_CANDIDATES = 5
APPROX_EPSILON_RATIO = 0.03

# Contrast enhancement
ADAPTIVE_BLOCK_SIZE = 15
ADAPTIVE_OFFSET = 15
DEFAULT_OUTPUT_SIZE = (1080, 1920)  # (width, height)


def extract_edges(image):
    """
    Turn a raw image into a binary edge map for contour tracing

    Grayscale, 5x5 Gaussian blur, triangle threshold, Canny with hysteresis
    and a 9x9 dilation that closes small gaps in the document border.

    Args:
        image: Input BGR, BGRA or grayscale image

    Returns:
        Single-channel uint8 edge map of the same height and width
    """
    validate_image(image)

    gray = to_grayscale(image)
    blurred = cv2.GaussianBlur(gray, BLUR_KERNEL_SIZE, 0)

    # Triangle method picks its own level; the lower bound is only nominal
    _, binary = cv2.threshold(
        blurred,
        THRESHOLD_LOWER_BOUND,
        THRESHOLD_MAX_VALUE,
        cv2.THRESH_BINARY | cv2.THRESH_TRIANGLE,
    )

    edges = cv2.Canny(binary, CANNY_LOW_THRESHOLD, CANNY_HIGH_THRESHOLD)

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, DILATE_KERNEL_SIZE)
    return cv2.dilate(edges, kernel)


def find_contours(edge_map) -> List[np.ndarray]:
    """
    Trace every boundary in an edge map, largest enclosed area first

    Contours with equal area keep the order in which they were traced.

    Args:
        edge_map: Binary single-channel edge map

    Returns:
        List of contours, possibly empty
    """
    validate_image(edge_map, "edge_map")
    if edge_map.ndim != 2:
        raise InvalidInputError(
            f"edge_map must be single-channel, got shape {edge_map.shape}"
        )

    contours = imutils.grab_contours(
        cv2.findContours(edge_map, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
    )
    return sorted(contours, key=cv2.contourArea, reverse=True)


def select_quadrilateral(contours, image_size: Tuple[int, int],
                         max_candidates: int = MAX_CANDIDATES) -> Optional[Corners]:
    """
    Pick the first large contour that simplifies to a convex quadrilateral

    Only the ``max_candidates`` largest contours are looked at. Smaller ones
    are never examined, even when none of the large ones qualifies.

    Args:
        contours: Contours sorted by area, largest first
        image_size: (width, height) of the image the contours come from
        max_candidates: Number of contours to examine

    Returns:
        Ordered Corners, or None if no candidate qualifies
    """
    if max_candidates < 0:
        raise ValueError(f"max_candidates must be >= 0, got {max_candidates}")

    candidates = contours[:max_candidates]
    logger.debug(f"Examining {len(candidates)} of {len(contours)} contours")

    for index, contour in enumerate(candidates):
        curve = np.asarray(contour, dtype=np.float32)
        perimeter = cv2.arcLength(curve, True)
        approx = cv2.approxPolyDP(curve, APPROX_EPSILON_RATIO * perimeter, True)

        if len(approx) == 4 and cv2.isContourConvex(approx.astype(np.int32)):
            logger.debug(f"Candidate {index} accepted as document outline")
            return Corners.from_points(order_points(approx.reshape(4, 2)), image_size)

    return None


def order_points(pts):
    """Order points in consistent order: tl, tr, br, bl"""
    pts = as_point_array(pts)

    # Create array for ordered points
    rect = np.zeros((4, 2), dtype=np.float32)

    # Top-left point has smallest sum
    # Bottom-right point has largest sum
    s = pts.sum(axis=1)
    rect[0] = pts[np.argmin(s)]
    rect[2] = pts[np.argmax(s)]

    # Top-right point has smallest difference (y - x)
    # Bottom-left point has largest difference
    diff = np.diff(pts, axis=1)
    rect[1] = pts[np.argmin(diff)]
    rect[3] = pts[np.argmax(diff)]

    return rect


def rectified_size(corners) -> Tuple[int, int, float, float]:
    """
    Compute the output size for a set of ordered corners

    Returns:
        tuple: (width, height, exact_width, exact_height) where width and
        height are the exact values truncated to whole pixels
    """
    (tl, tr, br, bl) = _corner_array(corners)

    # Calculate width of new image
    width_a = np.sqrt(((br[0] - bl[0]) ** 2) + ((br[1] - bl[1]) ** 2))
    width_b = np.sqrt(((tr[0] - tl[0]) ** 2) + ((tr[1] - tl[1]) ** 2))
    exact_width = float(max(width_a, width_b))

    # Calculate height of new image
    height_a = np.sqrt(((tr[0] - br[0]) ** 2) + ((tr[1] - br[1]) ** 2))
    height_b = np.sqrt(((tl[0] - bl[0]) ** 2) + ((tl[1] - bl[1]) ** 2))
    exact_height = float(max(height_a, height_b))

    return int(exact_width), int(exact_height), exact_width, exact_height


def four_point_transform(image, corners):
    """
    Apply perspective transform to get a top-down view of the document

    Args:
        image: Source image
        corners: Corners, or a (4, 2) array in tl, tr, br, bl order

    Returns:
        New image of the rectified size with the source's channel layout
    """
    validate_image(image)
    rect = _corner_array(corners)

    max_width, max_height, exact_width, exact_height = rectified_size(rect)
    if max_width <= 0 or max_height <= 0:
        raise DegenerateGeometryError(
            f"Corners span {exact_width:.2f}x{exact_height:.2f} pixels"
        )

    # Destination points for transform (top-down view)
    dst = np.array([
        [0, 0],
        [exact_width, 0],
        [exact_width, exact_height],
        [0, exact_height]
    ], dtype=np.float32)

    # Calculate perspective transform matrix and apply it
    try:
        M = cv2.getPerspectiveTransform(rect, dst)
    except cv2.error as e:
        raise DegenerateGeometryError(f"No perspective transform for corners: {e}") from e
    if not np.all(np.isfinite(M)) or abs(np.linalg.det(M)) < 1e-12:
        raise DegenerateGeometryError("Corners do not define a valid quadrilateral")

    warped = cv2.warpPerspective(image, M, (max_width, max_height))
    if image.ndim == 3 and warped.ndim == 2:
        # OpenCV drops a single channel axis
        warped = warped[:, :, np.newaxis]
    logger.debug(f"Rectified {image.shape} to {max_width}x{max_height}")

    return warped


def resolve_output_size(size=None) -> Tuple[int, int]:
    """
    Return the (width, height) for an enhanced image

    Falls back to DEFAULT_OUTPUT_SIZE when ``size`` is missing or has a
    non-positive dimension, for callers that cannot report one.
    """
    if size is None:
        return DEFAULT_OUTPUT_SIZE
    width, height = as_image_size(size)
    if width <= 0 or height <= 0:
        return DEFAULT_OUTPUT_SIZE
    return width, height


def enhance_document(image, output_size=None):
    """
    Give a rectified document a black and white "scanned" look

    Args:
        image: Input document image (left unmodified)
        output_size: Optional (width, height); defaults to the input size

    Returns:
        New 3-channel BGR image containing only black and white pixels
    """
    validate_image(image)

    gray = to_grayscale(image)
    binary = cv2.adaptiveThreshold(
        gray, 255, cv2.ADAPTIVE_THRESH_MEAN_C, cv2.THRESH_BINARY,
        ADAPTIVE_BLOCK_SIZE, ADAPTIVE_OFFSET
    )

    width, height = resolve_output_size(
        image_size(image) if output_size is None else output_size
    )
    if (width, height) != image_size(binary):
        # Nearest neighbour keeps the result two-valued
        binary = cv2.resize(binary, (width, height), interpolation=cv2.INTER_NEAREST)

    return cv2.cvtColor(binary, cv2.COLOR_GRAY2BGR)


def detect_document(frame, max_candidates=MAX_CANDIDATES) -> Optional[Corners]:
    """
    Detect a document in a frame using edge detection and contour analysis

    Args:
        frame: Input BGR, BGRA or grayscale image
        max_candidates: Number of largest contours to examine

    Returns:
        Corners tagged with the frame size, or None if nothing was found
    """
    validate_image(frame, "frame")

    edges = extract_edges(frame)
    contours = find_contours(edges)
    corners = select_quadrilateral(contours, image_size(frame), max_candidates)

    if corners is None:
        logger.debug(f"No document outline among {len(contours)} contours")
    return corners


def rectify_and_enhance(full_image, corners, enhance=False):
    """
    Crop a confirmed document out of the full image

    Args:
        full_image: Full resolution source image
        corners: Confirmed corners in tl, tr, br, bl order
        enhance: Whether to apply the black and white filter

    Returns:
        Rectified (and optionally enhanced) image
    """
    validate_image(full_image, "full_image")

    full_size = image_size(full_image)
    if isinstance(corners, Corners) and corners.image_size != full_size:
        logger.warning(
            f"Corners were found on a {corners.image_size[0]}x{corners.image_size[1]} "
            f"image but applied to {full_size[0]}x{full_size[1]}; "
            f"rescale them with Corners.scaled_to first"
        )

    document = four_point_transform(full_image, corners)
    if enhance:
        return enhance_document(document)
    return document


def _corner_array(corners):
    """Return corners as a (4, 2) float32 array without reordering"""
    if isinstance(corners, Corners):
        return corners.as_array()
    return as_point_array(corners)
