"""buildprep — native build environment preparation."""

__version__ = "0.1.0"
