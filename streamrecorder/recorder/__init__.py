"""Segment acquisition: playlist parsing, de-duplication, ordered append."""

from .append_sink import AppendSink
from .playlist_parser import choose_variant, iter_segment_locators, parse_variants
from .progress import ProgressReporter
from .seen_set import SeenSet
from .segment_recorder import RecorderState, SegmentRecorder
from .supervisor import RetryPolicy, run_supervised

__all__ = [
    "AppendSink",
    "ProgressReporter",
    "RecorderState",
    "RetryPolicy",
    "SeenSet",
    "SegmentRecorder",
    "choose_variant",
    "iter_segment_locators",
    "parse_variants",
    "run_supervised",
]
