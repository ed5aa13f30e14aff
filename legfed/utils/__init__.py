"""
LegFed Utility Library.

Modules:
--------
logging_setup
    Logging configuration utilities.
file_io
    Gzip-aware file opening and README detection.
"""

from legfed.utils.logging_setup import setup_logging, level_from_name
from legfed.utils.file_io import open_file, is_readme
