"""Segmentation and side matching of photographed jigsaw-puzzle pieces."""

__version__ = "0.1.0"
