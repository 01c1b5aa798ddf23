import json
import logging
from typing import List

from forwarder.collector import Collector, Snapshot
from forwarder.models import ContainerReference, ContainerStats

logger = logging.getLogger(__name__)


class SnapshotCollector(Collector):
    """
    Collector replaying snapshots from a JSON file.

    The file holds a list of entries of the form
    {"reference": {"name": ..., "aliases": [...], "namespace": ..., "labels": {...}},
     "stats": {"cpu": {"usage": {"total": ...}}, "memory": {...}, "network": {...},
               "filesystem": [{"device": ..., "limit": ..., "usage": ...}]}}.
    The file is re-read on every collection so it can be updated in place.
    """

    def __init__(self, path: str):
        self.path = path

    def collect(self) -> List[Snapshot]:
        try:
            with open(self.path, 'r') as f:
                entries = json.load(f)
        except FileNotFoundError as e:
            raise RuntimeError(f'Snapshot file not found: {self.path}') from e
        except json.JSONDecodeError as e:
            raise RuntimeError(f'Invalid snapshot file {self.path}: {str(e)}') from e

        if not isinstance(entries, list):
            raise RuntimeError(f'Snapshot file {self.path} must hold a list of entries')

        snapshots = []
        for entry in entries:
            ref = ContainerReference.from_dict(entry.get('reference') or {})
            stats = ContainerStats.from_dict(entry.get('stats'))
            snapshots.append((ref, stats))

        logger.debug("Loaded %d snapshots from %s", len(snapshots), self.path)
        return snapshots
