"""
Rendering of metric values into Wavefront line protocol.

A line looks like:

    cadvisor.memory_usage 50 1700000000 source=host1 container="c1" az="us-west-2"  namespace="ns" \n

Tag values are wrapped in double quotes and otherwise passed through as-is.
"""
from typing import Mapping

from .config import AdapterConfig
from .encoder import DEVICE_SEPARATOR
from .models import ContainerReference


def build_appended_tags(ref: ContainerReference) -> str:
    """
    Render the namespace and label tags of a container.

    Args:
        ref (ContainerReference): The container

    Returns:
        str: Tags, each preceded by a single space; empty when there are none
    """
    append_tags = ''
    if ref.namespace:
        append_tags += f' namespace="{ref.namespace}"'
    for key, value in ref.labels.items():
        append_tags += f' {key}="{value}"'
    return append_tags


def format_line(
    key: str,
    value: int,
    timestamp: int,
    config: AdapterConfig,
    container_name: str,
    appended_tags: str
) -> str:
    """
    Render one metric as a newline terminated line.

    Keys of the form <device>~<metric> become <metric> with a device tag.

    Args:
        key (str): Metric key from the encoder
        value (int): Metric value
        timestamp (int): Unix timestamp in seconds shared by the whole flush
        config (AdapterConfig): Supplies the prefix, source and extra tags
        container_name (str): Display name of the container
        appended_tags (str): Output of build_appended_tags()

    Returns:
        str: The formatted line
    """
    if DEVICE_SEPARATOR in key:
        # storage device metrics - extract device as point tag.
        device, metric = key.rsplit(DEVICE_SEPARATOR, 1)
        return (
            f'{config.prefix}{metric} {value} {timestamp} source={config.source} '
            f'container="{container_name}" device="{device}" {config.add_tags} {appended_tags} \n'
        )
    return (
        f'{config.prefix}{key} {value} {timestamp} source={config.source} '
        f'container="{container_name}" {config.add_tags} {appended_tags} \n'
    )


def format_series(
    series: Mapping[str, int],
    timestamp: int,
    config: AdapterConfig,
    ref: ContainerReference
):
    """Yield one line per entry of a metric set."""
    appended_tags = build_appended_tags(ref)
    for key, value in series.items():
        yield format_line(key, value, timestamp, config, ref.display_name, appended_tags)
