import logging

from .core import IntervalMap, interval_map
from .interval import Span

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "IntervalMap",
    "Span",
    "interval_map",
]
