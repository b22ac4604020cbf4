"""Mask cleanup, piece segmentation and boundary decomposition."""
