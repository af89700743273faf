"""REST API client for deutschweg server."""

import requests


class DeutschWegAPIClient:
    """Client for communicating with the deutschweg REST API."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        response = self.session.get(f"{self.base_url}{endpoint}", params=params or {})
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        response = self.session.post(f"{self.base_url}{endpoint}", json=data or {})
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        return self._get("/")

    def get_status(self) -> dict:
        """Due count, catalog size and session status."""
        return self._get("/api/status")

    def get_modes(self) -> dict:
        return self._get("/api/modes")

    def start_session(self, mode: str, level: str = None, categories: list[str] = None) -> dict:
        """Start a quiz session. Raises requests.HTTPError (409) if nothing is due."""
        return self._post("/api/session/start", {
            'mode': mode,
            'level': level,
            'categories': categories
        })

    def get_question(self) -> dict:
        return self._get("/api/session/question")

    def submit_answer(self, answer, context: str = None) -> dict:
        """Submit an answer (text, or a bool for flashcards)."""
        return self._post("/api/session/answer", {'answer': answer, 'context': context})

    def advance(self) -> dict:
        return self._post("/api/session/advance")

    def mark_known(self) -> dict:
        return self._post("/api/session/known")

    def end_session(self) -> dict:
        return self._post("/api/session/end")

    def get_item(self, item_id: str) -> dict:
        """Details for one catalog item."""
        return self._get(f"/api/items/{item_id}")

    def list_catalog(self, category: str, level: str = None) -> dict:
        params = {'level': level} if level else {}
        return self._get(f"/api/catalog/{category}", params)
