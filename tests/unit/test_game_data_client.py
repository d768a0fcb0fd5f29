import sys
from pathlib import Path
import unittest

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from gigsim.application.services.balance_tables import DEFAULT_GENRES
from gigsim.infrastructure.game_data_client import BundledGenreCatalog, GameDataClient
from gigsim.infrastructure.resilient_http import CircuitOpenError, fetch_json_document, reset_circuit_breakers


class GameDataClientTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_circuit_breakers()

    def _client_with_handler(self, handler, **kwargs):
        transport = httpx.MockTransport(handler)
        http_client = httpx.Client(base_url="https://data.test", transport=transport)
        return GameDataClient(base_url="https://data.test", http_client=http_client, **kwargs)

    def test_genres_are_read_from_game_data(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            return httpx.Response(200, json={"genres": ["Shoegaze", {"name": "Drill"}, "", "Shoegaze"]})

        client = self._client_with_handler(handler)

        self.assertEqual(["Shoegaze", "Drill"], client.genres())
        self.assertEqual("/data/gameData.json", captured["path"])
        client.close()

    def test_genres_are_cached_after_first_fetch(self) -> None:
        calls = []

        def handler(_: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(200, json={"genres": ["Shoegaze"]})

        client = self._client_with_handler(handler)
        client.genres()
        client.genres()

        self.assertEqual(1, len(calls))
        client.close()

    def test_server_failure_falls_back_to_bundled_genres(self) -> None:
        calls = []

        def handler(_: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503, json={"error": "down"})

        client = self._client_with_handler(handler, retries=1, backoff_seconds=0)

        with self.assertLogs("gigsim.infrastructure.game_data_client", level="WARNING"):
            genres = client.genres()

        self.assertEqual(list(DEFAULT_GENRES), genres)
        self.assertEqual(2, len(calls))
        client.close()

    def test_missing_genre_list_falls_back(self) -> None:
        client = self._client_with_handler(lambda _: httpx.Response(200, json={"studios": []}))
        self.assertEqual(list(DEFAULT_GENRES), client.genres())
        client.close()

    def test_non_object_document_falls_back(self) -> None:
        client = self._client_with_handler(lambda _: httpx.Response(200, json=["Shoegaze"]))

        with self.assertLogs("gigsim.infrastructure.game_data_client", level="WARNING"):
            self.assertEqual(list(DEFAULT_GENRES), client.genres())
        client.close()

    def test_bundled_catalog(self) -> None:
        self.assertEqual(list(DEFAULT_GENRES), BundledGenreCatalog().genres())
        self.assertEqual(["Pop"], BundledGenreCatalog(["Pop"]).genres())


class ResilientHttpTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_circuit_breakers()

    def tearDown(self) -> None:
        reset_circuit_breakers()

    def test_client_errors_are_not_retried(self) -> None:
        calls = []

        def handler(_: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(404)

        client = httpx.Client(base_url="https://data.test", transport=httpx.MockTransport(handler))
        with self.assertRaises(httpx.HTTPStatusError):
            fetch_json_document(client, "data/gameData.json", retries=3, backoff_seconds=0)

        self.assertEqual(1, len(calls))
        client.close()

    def test_repeated_failures_open_the_circuit(self) -> None:
        client = httpx.Client(base_url="https://flaky.test", transport=httpx.MockTransport(lambda _: httpx.Response(502)))

        for _ in range(3):
            with self.assertRaises(httpx.HTTPStatusError):
                fetch_json_document(client, "data/gameData.json", retries=0, backoff_seconds=0)
        with self.assertRaises(CircuitOpenError):
            fetch_json_document(client, "data/gameData.json", retries=0, backoff_seconds=0)
        client.close()


if __name__ == "__main__":
    unittest.main()
