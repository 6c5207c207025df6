"""memsampler: sampled /proc/meminfo reader."""

AGENT_VERSION = "0.1.0"
