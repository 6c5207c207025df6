"""memsampler.collectors package exports."""

from memsampler.collectors.base import PollOutcome, run_poll
from memsampler.collectors.buffer import INITIAL_BUF_SIZE, LineCursor, ReadBuffer
from memsampler.collectors.lookup import build_line_index
from memsampler.collectors.meminfo import MEMINFO_PATH, MemInfo, MemStats
from memsampler.collectors.policy import FREE_POLICY, UsedPolicy
from memsampler.collectors.values import SUFFIX_WIDTH, parse_value_from_line

__all__ = [
    "FREE_POLICY",
    "INITIAL_BUF_SIZE",
    "LineCursor",
    "MEMINFO_PATH",
    "MemInfo",
    "MemStats",
    "PollOutcome",
    "ReadBuffer",
    "SUFFIX_WIDTH",
    "UsedPolicy",
    "build_line_index",
    "parse_value_from_line",
    "run_poll",
]
