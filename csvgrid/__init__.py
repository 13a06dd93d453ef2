"""csvgrid: decode delimited time-series files into grid-aligned buffers."""

__version__ = "0.1.0"
