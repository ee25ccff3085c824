"""Main entry point: push one example series to a hosted metrics instance."""
import argparse
import logging
import sys

from promwrite.client import WriteClient
from promwrite.config import LoggingConfig, load_client_config
from promwrite.encoder import encode
from promwrite.example import build_example_series
from promwrite.exceptions import PromWriteError


def setup_logging(log_level: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Push an example series to a hosted metrics instance via Prometheus remote write"
    )
    parser.add_argument(
        "-instance.id",
        "--instance.id",
        dest="instance_id",
        default="",
        help="instance id of the desired hosted metrics instance"
    )
    parser.add_argument(
        "-api.key",
        "--api.key",
        dest="api_key",
        default="",
        help="api key for the desired hosted metrics instance"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $LOG_LEVEL or INFO)"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main function."""
    args = parse_args(argv)

    if not args.instance_id.strip():
        print("error: -instance.id not set")
        return 1

    if not args.api_key.strip():
        print("error: -api.key not set")
        return 1

    try:
        logging_config = LoggingConfig() if args.log_level is None else LoggingConfig(log_level=args.log_level)
        config = load_client_config(args.instance_id, args.api_key)
    except ValueError as e:
        print(f"error: {e}")
        return 1

    setup_logging(logging_config.log_level)
    logger = logging.getLogger(__name__)

    series = build_example_series()
    for ts in series:
        logger.info(f"Prepared series {ts.label_key()} with {len(ts.samples)} samples")

    try:
        payload = encode(series)
        with WriteClient(config) as client:
            client.send(payload)
            logger.debug(f"Client metrics:\n{client.metrics.render()}")
    except PromWriteError as e:
        print(e)
        return 1

    logger.info(f"Pushed {len(series)} series to {config.endpoint}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
