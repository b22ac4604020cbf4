"""Shared helpers: statistics, logging, parallelism, image I/O and debug output."""
