"""
Utility functions for the paper scanner
"""

import os
import time

import cv2
import numpy as np

from .errors import InvalidInputError


def ensure_directory(directory):
    """
    Create the specified directory if it doesn't exist

    Args:
        directory: Path to the directory to create
    """
    os.makedirs(directory, exist_ok=True)


def validate_image(image, name="image"):
    """
    Check that an image is a non-empty uint8 array with 1, 3 or 4 channels

    Args:
        image: Candidate image
        name: Argument name used in error messages

    Returns:
        The same image, unchanged
    """
    if image is None:
        raise InvalidInputError(f"{name} is None")
    if not isinstance(image, np.ndarray):
        raise InvalidInputError(
            f"{name} must be a numpy array, got {type(image).__name__}"
        )
    if image.ndim not in (2, 3):
        raise InvalidInputError(f"{name} must be 2D or 3D, got shape {image.shape}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidInputError(f"{name} has no pixels (shape {image.shape})")
    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise InvalidInputError(
            f"{name} must have 1, 3 or 4 channels, got {image.shape[2]}"
        )
    if image.dtype != np.uint8:
        raise InvalidInputError(f"{name} must be uint8, got {image.dtype}")
    return image


def image_size(image):
    """Return (width, height) of an image array"""
    return image.shape[1], image.shape[0]


def to_grayscale(image):
    """
    Convert a BGR, BGRA or single-channel image to a new grayscale array

    The input is never modified.
    """
    if image.ndim == 2:
        return image.copy()
    channels = image.shape[2]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image[:, :, 0].copy()


class Timer:
    def __init__(self):
        self.start_time = None

    def start(self):
        self.start_time = time.perf_counter()

    def stop(self) -> float:
        if self.start_time is None:
            return 0.0
        elapsed = time.perf_counter() - self.start_time
        self.start_time = None
        return elapsed
