"""
Record parsers.

One module per input format. Each parser maps a raw line to a record
dataclass with to_line(), or to SKIP for blank, comment and column-header
lines.
"""

from legfed.parsers.records import SKIP, RecordParser
from legfed.parsers.header import HeaderConfig, parse_header
