"""Tools for comparing pictures and raw YUV 4:2:0 video frames."""

__version__ = "0.1.0"