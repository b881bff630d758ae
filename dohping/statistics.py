"""
Statistical aggregation for ICMP probe results.

Calculates:
- Loss: probes sent versus replies received
- Latency: truncated integer mean, min, max
- Jitter: mean difference between consecutive replies
"""

from typing import Sequence

import numpy as np

from .models import ProbeStatistics


def summarize(rtts_ms: Sequence[float], sent: int) -> ProbeStatistics:
    """
    Aggregate round-trip times of one probe sequence.

    Each round-trip time is truncated to whole milliseconds before the
    mean is taken, and the mean itself is truncated to an integer.

    Args:
        rtts_ms: Round-trip times of the answered probes, in send order
        sent: Total number of probes sent, answered or not

    Returns:
        ProbeStatistics for the sequence
    """
    if len(rtts_ms) > sent:
        raise ValueError(f"{len(rtts_ms)} replies for {sent} probes")

    if not rtts_ms:
        return ProbeStatistics(sent=sent, received=0)

    latencies = np.asarray(rtts_ms, dtype=float)
    whole_ms = np.trunc(latencies)

    if len(latencies) > 1:
        jitter = float(np.mean(np.abs(np.diff(latencies))))
    else:
        jitter = 0.0

    return ProbeStatistics(
        sent=sent,
        received=len(latencies),
        mean_latency_ms=int(np.mean(whole_ms)),
        min_latency_ms=float(np.min(latencies)),
        max_latency_ms=float(np.max(latencies)),
        jitter_ms=jitter,
    )
