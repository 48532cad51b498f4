#!/usr/bin/env python3
"""
Paper Scanner - command line application module
Detects, crops and optionally enhances documents in image files
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import cv2
import imutils
from tqdm import tqdm

from .corners import corners_from_sequence
from .document import MAX_CANDIDATES, detect_document, rectify_and_enhance
from .errors import ScannerError
from .utils import Timer, ensure_directory, image_size

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff']


def collect_images(inputs, extensions=IMAGE_EXTENSIONS):
    """
    Expand files and directories into a sorted list of image paths

    Args:
        inputs: Iterable of file or directory paths
        extensions: Accepted file extensions (case-insensitive)

    Returns:
        list: Image paths, without duplicates
    """
    found = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            found.extend(sorted(
                p for p in path.iterdir()
                if p.is_file() and p.suffix.lower() in extensions
            ))
        elif path.is_file():
            found.append(path)
        else:
            logger.warning(f"Skipping {path}: no such file or directory")

    unique = []
    seen = set()
    for path in found:
        if path.resolve() not in seen:
            seen.add(path.resolve())
            unique.append(path)
    return unique


class DocumentScanner:
    """Document scanner application class"""

    def __init__(self, output_dir="scans", enhance=False, detect_height=500,
                 max_candidates=MAX_CANDIDATES):
        """
        Initialize the document scanner

        Args:
            output_dir (str): Directory to save scanned documents
            enhance (bool): Apply the black and white filter to crops
            detect_height (int): Height of the preview used for detection,
                0 to detect on the full image
            max_candidates (int): Number of largest contours to examine
        """
        self.output_dir = Path(output_dir)
        self.enhance = enhance
        self.detect_height = detect_height
        self.max_candidates = max_candidates

    def detect(self, image):
        """
        Find document corners in full resolution coordinates

        Detection runs on a downscaled preview, the way a live camera
        preview would, and the corners are scaled back to the full image.
        """
        height = image.shape[0]
        if self.detect_height and height > self.detect_height:
            preview = imutils.resize(image, height=self.detect_height)
        else:
            preview = image

        corners = detect_document(preview, max_candidates=self.max_candidates)
        if corners is None or preview is image:
            return corners

        return corners.scaled_to(*image_size(image))

    def scan_file(self, image_path, corners=None):
        """
        Scan a single image file

        Args:
            image_path: Path to the input image
            corners: Optional flat sequence of 8 confirmed coordinates

        Returns:
            Path of the saved document, or None if nothing was saved
        """
        image_path = Path(image_path)
        image = cv2.imread(str(image_path))
        if image is None:
            logger.error(f"Could not load image {image_path}")
            return None

        timer = Timer()
        timer.start()

        if corners is not None:
            found = corners_from_sequence(corners, image_size(image))
        else:
            found = self.detect(image)
            if found is None:
                logger.info(f"No document detected in {image_path.name}")
                return None

        document = rectify_and_enhance(image, found, enhance=self.enhance)
        elapsed = timer.stop()

        ensure_directory(self.output_dir)
        output_path = self.output_dir / f"{image_path.stem}_scan{image_path.suffix}"
        if not cv2.imwrite(str(output_path), document):
            logger.error(f"Could not write {output_path}")
            return None

        logger.debug(
            f"{image_path.name}: {document.shape[1]}x{document.shape[0]} "
            f"in {elapsed:.3f} seconds"
        )
        return output_path

    def scan_paths(self, paths, corners=None):
        """
        Scan every image, continuing past files that fail

        Returns:
            tuple: (saved output paths, number of failed files)
        """
        saved = []
        failures = 0
        for path in tqdm(paths, desc="Scanning documents", disable=len(paths) < 2):
            try:
                output_path = self.scan_file(path, corners=corners)
            except ScannerError as e:
                logger.error(f"Failed to scan {path}: {e}")
                failures += 1
                continue

            if output_path is None:
                failures += 1
            else:
                saved.append(output_path)
        return saved, failures


def parse_corners(value):
    """argparse type for --corners: eight comma separated numbers"""
    try:
        values = [float(v) for v in value.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid corner list: {value!r}") from None
    if len(values) != 8:
        raise argparse.ArgumentTypeError(
            f"expected 8 comma separated values (x1,y1,...,x4,y4), got {len(values)}"
        )
    return values


def build_parser():
    parser = argparse.ArgumentParser(
        description="Detect and flatten documents in photos"
    )
    parser.add_argument("inputs", nargs="+",
                        help="Image files or directories to scan")
    parser.add_argument("--output", "-o", type=str, default="scans",
                        help="Directory to save scanned documents")
    parser.add_argument("--enhance", "-e", action="store_true",
                        help="Apply the black and white scan filter")
    parser.add_argument("--detect-height", type=int, default=500,
                        help="Preview height used for detection (0 = full size)")
    parser.add_argument("--max-candidates", type=int, default=MAX_CANDIDATES,
                        help="Number of largest contours to examine")
    parser.add_argument("--corners", type=parse_corners, default=None,
                        help="Confirmed corners x1,y1,...,x4,y4 in tl, tr, br, bl "
                             "order (single input only)")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv=None):
    """Entry point function when script is run directly"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.detect_height < 0:
        parser.error("--detect-height must be >= 0")
    if args.max_candidates < 0:
        parser.error("--max-candidates must be >= 0")

    paths = collect_images(args.inputs)
    if not paths:
        logger.warning("No valid images found")
        return 1
    if args.corners is not None and len(paths) != 1:
        parser.error("--corners can only be used with a single input image")

    scanner = DocumentScanner(
        output_dir=args.output,
        enhance=args.enhance,
        detect_height=args.detect_height,
        max_candidates=args.max_candidates
    )

    saved, failures = scanner.scan_paths(paths, corners=args.corners)

    for output_path in saved:
        print(f"Document saved: {os.path.basename(output_path)}")
    print(f"Scanned {len(saved)} of {len(paths)} images into {scanner.output_dir}")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
