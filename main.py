#!/usr/bin/env python3
"""Main entry point for the puzzle side matcher."""

import argparse
import os
import sys

from puzzle_sides.config.settings import (
    BLUR_STRENGTH, DATA_DIR, DEBUG_DIR, DEFAULT_MAX_WORKERS, DEFAULT_VERBOSITY,
    DRAW_MATCHING_PLOTS, EXPECTED_MATCHES, INPUT_EXTENSION, INPUT_NAMES, LOG_DIR,
    MORPHOLOGY_STRENGTH, USE_PARALLEL
)
from puzzle_sides.core.pipeline import process_image
from puzzle_sides.utils.logging_utils import log_manager
from puzzle_sides.utils.parallel import Timer


def resolve_image_path(name: str, data_dir: str) -> str:
    """Accept a bare image name (looked up in data_dir) or a path to a file."""
    if os.path.isfile(name):
        return name
    if os.path.splitext(name)[1]:
        return os.path.join(data_dir, name)
    return os.path.join(data_dir, name + INPUT_EXTENSION)


def main():
    """Main function for side matching."""
    parser = argparse.ArgumentParser(description='Puzzle Sides - piece segmentation and side matching')
    parser.add_argument('names', nargs='*', default=INPUT_NAMES,
                        help='Image names under the data directory (or image paths)')
    parser.add_argument('--data-dir', '-d', default=DATA_DIR,
                        help='Directory holding the input photos')
    parser.add_argument('--debug-dir', default=DEBUG_DIR,
                        help='Directory for debug images, one subfolder per photo')
    parser.add_argument('--strength', '-s', type=int, default=MORPHOLOGY_STRENGTH,
                        help='Radius of the mask cleanup morphology')
    parser.add_argument('--blur', '-b', type=float, default=BLUR_STRENGTH,
                        help='Smoothing of the side color sequences')
    parser.add_argument('--no-plots', action='store_true', default=not DRAW_MATCHING_PLOTS,
                        help='Skip the per-pair comparison plots')
    parser.add_argument('--no-parallel', action='store_true', default=not USE_PARALLEL,
                        help='Run everything on the main thread')
    parser.add_argument('--workers', '-w', type=int, default=DEFAULT_MAX_WORKERS,
                        help='Number of worker threads')
    parser.add_argument('--verbosity', '-v', default=DEFAULT_VERBOSITY,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level')
    parser.add_argument('--log-dir', default=LOG_DIR,
                        help='Directory for log files')

    args = parser.parse_args()

    log_manager.setup(log_dir=args.log_dir, verbosity=args.verbosity)
    logger = log_manager.get_logger('main')

    try:
        with Timer("Total processing"):
            for name in args.names:
                image_path = resolve_image_path(name, args.data_dir)
                image_name = os.path.splitext(os.path.basename(image_path))[0]
                logger.info(f"Processing {image_path}...")

                result = process_image(
                    image_path,
                    debug_dir=os.path.join(args.debug_dir, image_name),
                    strength=args.strength,
                    blur_strength=args.blur,
                    expected_matches=EXPECTED_MATCHES.get(image_name),
                    parallel=not args.no_parallel,
                    max_workers=args.workers,
                    draw_plots=not args.no_plots
                )

                if result.evaluation is not None:
                    logger.info(f"{image_name}: {result.evaluation.correct} correct, "
                                f"{result.evaluation.incorrect} incorrect matches")
    except Exception as e:
        logger.error(f"Error: {e}")
        logger.debug("Traceback:", exc_info=True)
        return 2

    logger.info("Process completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
