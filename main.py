#!/usr/bin/env python3
"""
CLI application for collecting container stats and forwarding them to a
Wavefront proxy.
"""
import argparse
import json
import logging
import os
import sys
import time
from typing import List, Dict, Any, Optional, Type, Tuple

from collectors.host_collector.host_collector import HostCollector
from collectors.snapshot_collector.snapshot_collector import SnapshotCollector
from forwarder.collector import Collector
from forwarder import config as forwarder_config
from forwarder.registry import new_storage_driver, get_available_drivers
from forwarder.sink import SinkConnectionError
# Registers the wavefront driver
from forwarder import storage  # noqa: F401

# Setup logging
logger = logging.getLogger(__name__)


class CollectorRegistry:
    """Maps collector type names such as "host" to collector classes."""

    def __init__(self):
        self.collectors = {}

    def register(self, collector_class: Type[Collector]) -> None:
        collector_type = collector_class.__name__.replace('Collector', '').lower()
        self.collectors[collector_type] = collector_class
        logger.debug("Registered collector: %s from class %s", collector_type, collector_class.__name__)

    def discover_collectors(self):
        """Register the collectors bundled under collectors/."""
        for collector_class in (HostCollector, SnapshotCollector):
            self.register(collector_class)

    def get_collector_class(self, collector_type: str) -> Optional[Type[Collector]]:
        return self.collectors.get(collector_type.lower())

    def get_available_collectors(self) -> List[str]:
        return sorted(self.collectors)


# Initialize collector registry
collector_registry = CollectorRegistry()


def setup_logging(log_level: str) -> None:
    """
    Setup logging with the specified log level.

    Args:
        log_level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )


def create_driver(args: argparse.Namespace):
    """
    Create the storage driver selected on the command line.

    Args:
        args (argparse.Namespace): Command line arguments

    Returns:
        The connected storage driver
    """
    return new_storage_driver(
        args.storage_driver,
        args.storage_driver_db,
        args.storage_driver_host,
        interval=args.interval,
        add_tags=args.add_tags,
        prefix=args.prefix,
        connect_timeout=args.connect_timeout
    )


def instantiate_collector(collector_type: str, collector_args: Dict[str, Any]) -> Optional[Collector]:
    """
    Instantiate a collector of the specified type with the provided arguments.

    Args:
        collector_type (str): Type of collector to instantiate
        collector_args (dict): Arguments to pass to the collector constructor

    Returns:
        Collector: An instance of the requested collector or None if not found
    """
    collector_type = collector_type.lower()
    if collector_type.endswith('collector'):
        collector_type = collector_type[:-9]  # Remove 'collector' suffix

    collector_class = collector_registry.get_collector_class(collector_type)

    if not collector_class:
        available = collector_registry.get_available_collectors()
        logger.error("Collector type not found: %s. Available collectors: %s",
                     collector_type, available if available else "None discovered")
        return None

    try:
        return collector_class(**collector_args)
    except Exception as e:
        logger.error("Error instantiating collector %s: %s", collector_type, e)
        return None


def parse_collector_spec(spec: str) -> Tuple[str, Dict[str, Any]]:
    """
    Parse a collector specification string into a collector type and parameters.

    Args:
        spec (str): Collector specification in format "type:param1=value1,param2=value2"

    Returns:
        tuple: (collector_type, parameters_dict)
    """
    parts = spec.split(':', 1)
    collector_type = parts[0].strip().lower()

    params = {}
    if len(parts) > 1 and parts[1].strip():
        for param in parts[1].strip().split(','):
            if '=' in param:
                key, value = param.split('=', 1)
                params[key.strip()] = value.strip()

    return collector_type, params


def build_collectors(specs: List[str]) -> List[Collector]:
    """Instantiate every collector named on the command line, skipping bad ones."""
    instances = []
    for collector_spec in specs:
        collector_type, params = parse_collector_spec(collector_spec)
        collector = instantiate_collector(collector_type, params)
        if collector:
            instances.append(collector)
    return instances


def run_round(collectors: List[Collector], driver, dry_run: bool = False) -> int:
    """
    Run one collection round.

    Returns:
        int: Number of snapshots pushed to the driver
    """
    pushed = 0
    for collector in collectors:
        pushed += collector.collect_and_push(driver, dry_run=dry_run)
    return pushed


def load_config_from_file(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_file (str): Path to the JSON config file

    Returns:
        dict: Configuration dictionary with argument names as keys
    """
    if not os.path.exists(config_file):
        logger.error("Config file not found: %s", config_file)
        return {}

    try:
        with open(config_file, 'r') as f:
            config = json.load(f)
            logger.debug("Loaded configuration from %s: %s", config_file, config)
            return config
    except (json.JSONDecodeError, ValueError) as e:
        logger.error("Error parsing config file %s: %s", config_file, e)
        return {}


def apply_config_defaults(parser: argparse.ArgumentParser, config: Dict[str, Any]) -> None:
    """
    Use configuration file values as parser defaults.
    Command line arguments take precedence over config file values, which take
    precedence over the built-in defaults.

    Args:
        parser (argparse.ArgumentParser): Parser to update
        config (dict): Configuration dictionary from file
    """
    known = {action.dest for action in parser._actions}
    defaults = {}
    for key, value in config.items():
        # Convert dashes to underscores in key names
        arg_key = key.replace('-', '_')
        if arg_key not in known:
            logger.warning("Ignoring unknown config file option: %s", key)
            continue
        defaults[arg_key] = value
    parser.set_defaults(**defaults)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Forward container stats to a Wavefront proxy.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--config-file', type=str,
                        help='Path to JSON configuration file')
    parser.add_argument('--log-level', type=str, default=forwarder_config.LOG_LEVEL.upper(),
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level')

    # Collection loop
    parser.add_argument('--collect-interval', type=int, default=10,
                        help='Interval between collection rounds in seconds')
    parser.add_argument('--count', type=int, default=0,
                        help='Number of collection rounds (0 for infinite)')
    parser.add_argument('--dry-run', action='store_true',
                        help='Do not connect to the proxy, just log the snapshots')
    parser.add_argument('--collectors', type=str, nargs='*',
                        help='List of collectors to run in format "type:param1=value1,param2=value2"')

    # Storage driver
    parser.add_argument('--storage-driver', type=str, default='wavefront',
                        help='Storage driver to forward stats to')
    parser.add_argument('--storage-driver-host', type=str, default=forwarder_config.PROXY_ADDRESS,
                        help='host:port of the Wavefront proxy')
    parser.add_argument('--storage-driver-db', type=str, default=forwarder_config.SOURCE_NAME,
                        help='Source tag attached to every metric')
    parser.add_argument('--interval', type=int, default=forwarder_config.INTERVAL,
                        help='Minimum seconds between flushes of one container (0 flushes every round)')
    parser.add_argument('--add-tags', type=str, default=forwarder_config.ADD_TAGS,
                        help='Tags appended to every metric line')
    parser.add_argument('--prefix', type=str, default=forwarder_config.PREFIX,
                        help='Prefix of every metric name')
    parser.add_argument('--connect-timeout', type=float, default=forwarder_config.CONNECT_TIMEOUT,
                        help='Seconds to wait for the proxy connection')

    return parser


def main(argv: Optional[List[str]] = None):
    """Main function to parse arguments and run the collection loop."""
    # Create first parser for early config file and log level
    early_parser = argparse.ArgumentParser(add_help=False)
    early_parser.add_argument('--config-file', type=str)
    early_parser.add_argument('--log-level', type=str, default=forwarder_config.LOG_LEVEL.upper())
    early_args, _ = early_parser.parse_known_args(argv)

    setup_logging(early_args.log_level)

    config = {}
    if early_args.config_file:
        logger.info("Loading configuration from %s", early_args.config_file)
        config = load_config_from_file(early_args.config_file)

    logger.info("Discovering collectors...")
    collector_registry.discover_collectors()
    logger.info("Available collectors: %s", collector_registry.get_available_collectors())

    parser = build_parser()
    if config:
        apply_config_defaults(parser, config)
    args = parser.parse_args(argv)

    if not args.collectors:
        parser.error("the --collectors argument is required either on command line or in config file")

    setup_logging(args.log_level)

    collectors = build_collectors(args.collectors)
    if not collectors:
        logger.error("No usable collectors. Use --collectors to specify the collectors to run.")
        sys.exit(1)

    driver = None
    if not args.dry_run:
        try:
            driver = create_driver(args)
        except ValueError as e:
            logger.error("%s", e)
            logger.error("Available storage drivers: %s", get_available_drivers())
            sys.exit(1)
        except SinkConnectionError as e:
            logger.error("Failed to start storage driver %s: %s", args.storage_driver, e)
            sys.exit(1)

    # Run collection rounds
    round_count = 0
    next_collection_time = time.time()
    try:
        while args.count == 0 or round_count < args.count:
            current_time = time.time()

            # Ensure we're on schedule
            if current_time > next_collection_time:
                next_collection_time = current_time

            round_count += 1
            logger.info("Collection round %s%s", round_count,
                        ("/%s" % args.count if args.count > 0 else ""))

            collection_start_time = time.time()
            pushed = run_round(collectors, driver, dry_run=args.dry_run)
            logger.debug("Pushed %d snapshots in %.2f seconds", pushed, time.time() - collection_start_time)

            if args.count == 0 or round_count < args.count:
                next_collection_time += args.collect_interval
                wait_time = next_collection_time - time.time()

                if wait_time > 0:
                    logger.debug("Waiting %.2f seconds until next collection...", wait_time)
                    time.sleep(wait_time)
                else:
                    logger.warning("Collection took longer than interval. Next collection will start immediately.")

    except KeyboardInterrupt:
        logger.info("Collection interrupted by user.")
    finally:
        if driver is not None:
            driver.close()

    logger.info("Collection completed.")


if __name__ == "__main__":
    main()
