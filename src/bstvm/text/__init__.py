"""Text algorithms behind the string built-ins."""

from bstvm.text.case import change_case
from bstvm.text.measure import add_period, substring, text_length, text_prefix
from bstvm.text.names import format_name, num_names, parse_name, split_names
from bstvm.text.purify import purify
from bstvm.text.width import width

__all__ = [
    "add_period",
    "change_case",
    "format_name",
    "num_names",
    "parse_name",
    "purify",
    "split_names",
    "substring",
    "text_length",
    "text_prefix",
    "width",
]
