from abc import ABC, abstractmethod
from typing import Optional, Sequence

from gigsim.domain.models.snapshot import RivalCatalog, Snapshot


class SnapshotRepository(ABC):
    @abstractmethod
    def load(self, session_id: str) -> Optional[Snapshot]:
        raise NotImplementedError

    @abstractmethod
    def save(self, session_id: str, snapshot: Snapshot) -> None:
        raise NotImplementedError

    def exists(self, session_id: str) -> bool:
        return self.load(session_id) is not None


class GenreCatalogSource(ABC):
    @abstractmethod
    def genres(self) -> list[str]:
        raise NotImplementedError


class RivalContentGenerator(ABC):
    @abstractmethod
    def generate(self, *, week: int, seed: int, genres: Sequence[str]) -> RivalCatalog:
        raise NotImplementedError
