"""Data structures for remote-write time series."""
from dataclasses import dataclass, field
from typing import List, Optional

METRIC_NAME_LABEL = "__name__"


@dataclass
class Label:
    """A single label name/value pair."""
    name: str
    value: str


@dataclass
class Sample:
    """One observation: a value at a millisecond unix timestamp."""
    value: float
    timestamp_ms: int


@dataclass
class TimeSeries:
    """A labeled series and its samples, both kept in input order."""
    labels: List[Label] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)

    @property
    def metric_name(self) -> Optional[str]:
        """Value of the __name__ label, if present."""
        for label in self.labels:
            if label.name == METRIC_NAME_LABEL:
                return label.value
        return None

    def label_key(self) -> str:
        """Generate a stable key from the labels in input order."""
        return ",".join(f"{label.name}={label.value}" for label in self.labels)
