import logging

import httpx

from gigsim.application.services.balance_tables import DEFAULT_GENRES
from gigsim.domain.repositories import GenreCatalogSource
from gigsim.infrastructure.resilient_http import fetch_json_document


logger = logging.getLogger(__name__)

GAME_DATA_PATH = "data/gameData.json"


def _genre_names(payload) -> list[str]:
    rows = payload.get("genres", []) if isinstance(payload, dict) else []
    names: list[str] = []
    for row in rows or []:
        name = row.get("name") if isinstance(row, dict) else row
        name = str(name or "").strip()
        if name and name not in names:
            names.append(name)
    return names


class GameDataClient(GenreCatalogSource):
    """Reads the static game data document; the bundled genre list covers any failure."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 2.0,
        retries: int = 1,
        backoff_seconds: float = 0.1,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._cached: list[str] | None = None

    def fetch(self) -> dict:
        return fetch_json_document(
            self.client,
            GAME_DATA_PATH,
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )

    def genres(self) -> list[str]:
        if self._cached is not None:
            return list(self._cached)
        try:
            names = _genre_names(self.fetch())
        except Exception as exc:
            logger.warning("Game data fetch failed; using bundled genres", extra={"error": str(exc)})
            names = []
        self._cached = names or list(DEFAULT_GENRES)
        return list(self._cached)

    def close(self) -> None:
        self.client.close()


class BundledGenreCatalog(GenreCatalogSource):
    def __init__(self, genres=None) -> None:
        self._genres = [str(genre) for genre in (genres or DEFAULT_GENRES)]

    def genres(self) -> list[str]:
        return list(self._genres)
