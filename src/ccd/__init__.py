"""ccd - jump to a directory by name fragment or keyword."""

__version__ = "0.1.0"
