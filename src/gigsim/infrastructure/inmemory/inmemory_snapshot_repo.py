from __future__ import annotations

import copy
from typing import Dict, List, Optional

from gigsim.domain.models.snapshot import Snapshot
from gigsim.domain.repositories import SnapshotRepository


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self, snapshots: Dict[str, Snapshot] | None = None) -> None:
        self._snapshots: Dict[str, Snapshot] = {
            str(key): copy.deepcopy(value) for key, value in (snapshots or {}).items()
        }

    def load(self, session_id: str) -> Optional[Snapshot]:
        snapshot = self._snapshots.get(str(session_id))
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, session_id: str, snapshot: Snapshot) -> None:
        self._snapshots[str(session_id)] = copy.deepcopy(snapshot)

    def list_sessions(self) -> List[str]:
        return sorted(self._snapshots)
