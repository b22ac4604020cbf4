"""Configuration for the puzzle side matcher."""
