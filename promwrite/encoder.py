"""Remote-write request encoding: series -> protobuf -> snappy block."""
import logging
from typing import List, Sequence

import snappy
from google.protobuf.message import DecodeError

from promwrite import prompb
from promwrite.exceptions import EncodingError
from promwrite.series import Label, Sample, TimeSeries

logger = logging.getLogger(__name__)


def build_write_request(series: Sequence[TimeSeries]):
    """Wrap series in a WriteRequest message, keeping label and sample order."""
    request = prompb.WriteRequest()
    for ts in series:
        pb_ts = request.timeseries.add()
        for label in ts.labels:
            pb_ts.labels.add(name=label.name, value=label.value)
        for sample in ts.samples:
            pb_ts.samples.add(value=sample.value, timestamp=sample.timestamp_ms)
    return request


def encode(series: Sequence[TimeSeries]) -> bytes:
    """
    Encode series into a snappy-compressed remote-write payload.

    Args:
        series: Time series to send; may be empty

    Returns:
        Snappy block-compressed, serialized WriteRequest

    Raises:
        EncodingError: if the series cannot be represented in the schema
    """
    try:
        request = build_write_request(series)
        data = request.SerializeToString(deterministic=True)
    except (TypeError, ValueError, AttributeError) as e:
        raise EncodingError(f"failed to build write request: {e}") from e

    compressed = snappy.compress(data)
    logger.debug(
        f"Encoded {len(request.timeseries)} series: "
        f"{len(data)} bytes raw, {len(compressed)} bytes compressed"
    )
    return compressed


def decode(payload: bytes) -> List[TimeSeries]:
    """Decode a payload produced by encode() back into series."""
    try:
        data = snappy.decompress(payload)
    except Exception as e:
        # snappy backends report corrupt input with their own exception types
        raise EncodingError(f"failed to decompress payload: {e}") from e

    try:
        request = prompb.WriteRequest.FromString(data)
    except DecodeError as e:
        raise EncodingError(f"failed to parse write request: {e}") from e

    return [
        TimeSeries(
            labels=[Label(label.name, label.value) for label in pb_ts.labels],
            samples=[Sample(sample.value, sample.timestamp) for sample in pb_ts.samples],
        )
        for pb_ts in request.timeseries
    ]
