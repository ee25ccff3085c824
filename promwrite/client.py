"""HTTP client that pushes encoded remote-write payloads."""
import logging
import threading
import time
from typing import Dict, Optional

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from promwrite.config import ClientConfig
from promwrite.exceptions import ResponseError, ServerError, TransportError
from promwrite.metrics import (
    RESULT_RESPONSE_ERROR,
    RESULT_SERVER_ERROR,
    RESULT_SUCCESS,
    RESULT_TRANSPORT_ERROR,
    ClientMetrics,
)

logger = logging.getLogger(__name__)

CONTENT_ENCODING = "snappy"
CONTENT_TYPE = "application/x-protobuf"
REMOTE_WRITE_VERSION = "0.1.0"

# Upper bound on how much of an unread response body is drained before close
DRAIN_LIMIT = 64 * 1024
DRAIN_CHUNK_SIZE = 4096


class WriteClient:
    """Sends remote-write payloads to a single hosted metrics endpoint.

    Each call to send() is one attempt: there is no retry or backoff. Callers
    that want resilience should wrap send() and inspect ``error.retryable``.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        metrics: Optional[ClientMetrics] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint, credentials and limits
            session: Transport to reuse across calls; created (and owned) if omitted
            metrics: Self-metrics sink; a private registry is used if omitted
        """
        self.config = config
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.metrics = metrics if metrics is not None else ClientMetrics()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        """Close the underlying session if this client created it."""
        if self._owns_session:
            self.session.close()

    def headers(self) -> Dict[str, str]:
        """Fixed headers sent with every request."""
        return {
            "Content-Encoding": CONTENT_ENCODING,
            "Content-Type": CONTENT_TYPE,
            "User-Agent": self.config.user_agent,
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
        }

    def send(self, payload: bytes) -> None:
        """
        Push one encoded payload.

        Raises:
            TransportError: the endpoint could not be reached in time
            ServerError: the endpoint answered 5xx
            ResponseError: the endpoint answered any other non-2xx status
        """
        self.metrics.record_sent_bytes(len(payload))
        start = time.monotonic()
        try:
            self._store(payload)
        except ServerError as e:
            self.metrics.record_result(RESULT_SERVER_ERROR)
            logger.warning(f"Remote write rejected by server: {e}")
            raise
        except ResponseError as e:
            self.metrics.record_result(RESULT_RESPONSE_ERROR)
            logger.warning(f"Remote write rejected: {e}")
            raise
        except TransportError as e:
            self.metrics.record_result(RESULT_TRANSPORT_ERROR)
            logger.warning(f"Remote write failed: {e}")
            raise
        else:
            self.metrics.record_result(RESULT_SUCCESS)
        finally:
            self.metrics.record_duration(time.monotonic() - start)

        logger.debug(f"Sent {len(payload)} bytes to {self.config.endpoint}")

    def _store(self, payload: bytes) -> None:
        """Run the whole request/response cycle under one wall-clock deadline."""
        exchange = _Exchange(self, payload)
        worker = threading.Thread(target=exchange.run, name="promwrite-send", daemon=True)
        worker.start()

        if not exchange.done.wait(self.config.timeout_s):
            exchange.cancel()
            raise TransportError(
                f"remote write to {self.config.endpoint} failed: "
                f"deadline of {self.config.timeout_s}s exceeded"
            )
        if exchange.error is not None:
            raise exchange.error

    def _exchange(self, payload: bytes, exchange: "_Exchange") -> None:
        try:
            response = self.session.post(
                self.config.endpoint,
                data=payload,
                headers=self.headers(),
                auth=(self.config.instance_id, self.config.api_key),
                timeout=self.config.timeout_s,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(f"remote write to {self.config.endpoint} failed: {e}") from e

        if not exchange.attach(response):
            # the caller already gave up; never hand this connection back to the pool
            response.close()
            return

        try:
            if response.status_code // 100 != 2:
                line = self._read_error_line(response)
                if response.status_code // 100 == 5:
                    raise ServerError(response.status_code, response.reason, line)
                raise ResponseError(response.status_code, response.reason, line)
        finally:
            self._release(response)

    def _read_error_line(self, response: requests.Response) -> str:
        """First line of at most max_error_message_len bytes of the body."""
        try:
            data = response.raw.read(self.config.max_error_message_len, decode_content=True)
        except (Urllib3HTTPError, OSError) as e:
            logger.debug(f"Could not read error response body: {e}")
            return ""

        lines = data[:self.config.max_error_message_len].decode("utf-8", errors="replace").splitlines()
        return lines[0] if lines else ""

    def _release(self, response: requests.Response) -> None:
        """Drain what is left of the body so the connection can be reused, then close it."""
        drained = 0
        try:
            for chunk in response.iter_content(chunk_size=DRAIN_CHUNK_SIZE):
                drained += len(chunk)
                if drained >= DRAIN_LIMIT:
                    break
        except requests.RequestException as e:
            logger.debug(f"Could not drain response body: {e}")
        finally:
            response.close()


class _Exchange:
    """One send running on a worker thread, abandoned by the caller at the deadline."""

    def __init__(self, client: WriteClient, payload: bytes):
        self.client = client
        self.payload = payload
        self.response: Optional[requests.Response] = None
        self.error: Optional[Exception] = None
        self.cancelled = False
        self.done = threading.Event()
        self._lock = threading.Lock()

    def run(self):
        try:
            self.client._exchange(self.payload, self)
        except Exception as e:
            # handed back to the calling thread by _store
            self.error = e
            if self.cancelled:
                logger.debug(f"Abandoned remote write ended with: {e}")
        finally:
            self.done.set()

    def attach(self, response: requests.Response) -> bool:
        """Register the live response; False if the deadline already passed."""
        with self._lock:
            if self.cancelled:
                return False
            self.response = response
            return True

    def cancel(self):
        """Stop waiting and close the response so pending body reads fail."""
        with self._lock:
            self.cancelled = True
            response = self.response
        if response is not None:
            response.close()
