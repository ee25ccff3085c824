"""Example series used by the CLI."""
import time
from typing import List, Optional

from promwrite.series import METRIC_NAME_LABEL, Label, Sample, TimeSeries


def build_example_series(now: Optional[float] = None) -> List[TimeSeries]:
    """One series with two samples, one second apart, at whole-second millisecond timestamps."""
    if now is None:
        now = time.time()

    return [
        TimeSeries(
            labels=[
                # prometheus stores the metric name as the __name__ label
                Label(METRIC_NAME_LABEL, "random_metric"),
                Label("example_label_name", "example_label_value"),
            ],
            samples=[
                Sample(value=1.0, timestamp_ms=int(now - 1) * 1000),
                Sample(value=1.0, timestamp_ms=int(now) * 1000),
            ],
        )
    ]
