"""
Container reference and stats snapshot types.

Field names follow the cAdvisor v1 API so that snapshots exported as JSON by
the monitoring host can be loaded without translation.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


@dataclass(frozen=True)
class ContainerReference:
    """Identity and metadata of a monitored container."""
    name: str
    aliases: List[str] = field(default_factory=list)
    namespace: str = ''
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """The first alias if there is one, otherwise the raw name."""
        if self.aliases:
            return self.aliases[0]
        return self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContainerReference':
        return cls(
            name=data.get('name', ''),
            aliases=list(data.get('aliases') or []),
            namespace=data.get('namespace') or '',
            labels=dict(data.get('labels') or {}),
        )


@dataclass(frozen=True)
class CpuUsage:
    total: int = 0


@dataclass(frozen=True)
class CpuStats:
    usage: CpuUsage = field(default_factory=CpuUsage)


@dataclass(frozen=True)
class MemoryStats:
    usage: int = 0
    working_set: int = 0


@dataclass(frozen=True)
class NetworkStats:
    rx_bytes: int = 0
    rx_errors: int = 0
    tx_bytes: int = 0
    tx_errors: int = 0


@dataclass(frozen=True)
class FsStats:
    """Usage of one filesystem device."""
    device: str
    limit: int = 0
    usage: int = 0


@dataclass(frozen=True)
class ContainerStats:
    """One point-in-time measurement bundle for a container."""
    cpu: CpuStats = field(default_factory=CpuStats)
    memory: MemoryStats = field(default_factory=MemoryStats)
    network: NetworkStats = field(default_factory=NetworkStats)
    filesystem: List[FsStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['ContainerStats']:
        """
        Build a snapshot from a cAdvisor style dictionary.

        Args:
            data (dict): Parsed JSON stats; None yields None

        Returns:
            ContainerStats: The snapshot, or None when no data was given
        """
        if data is None:
            return None

        cpu = data.get('cpu') or {}
        memory = data.get('memory') or {}
        network = data.get('network') or {}

        return cls(
            cpu=CpuStats(usage=CpuUsage(total=int((cpu.get('usage') or {}).get('total', 0)))),
            memory=MemoryStats(
                usage=int(memory.get('usage', 0)),
                working_set=int(memory.get('working_set', 0)),
            ),
            network=NetworkStats(
                rx_bytes=int(network.get('rx_bytes', 0)),
                rx_errors=int(network.get('rx_errors', 0)),
                tx_bytes=int(network.get('tx_bytes', 0)),
                tx_errors=int(network.get('tx_errors', 0)),
            ),
            filesystem=[
                FsStats(
                    device=fs.get('device', ''),
                    limit=int(fs.get('limit', 0)),
                    usage=int(fs.get('usage', 0)),
                )
                for fs in data.get('filesystem') or []
            ],
        )
