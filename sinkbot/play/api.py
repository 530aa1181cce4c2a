"""HTTP client for the remote game API."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from sinkbot.core.errors import GameTargetError, log_recoverable
from sinkbot.core.models import Ability, Position
from sinkbot.play.target import FireResponse

logger = logging.getLogger(__name__)


class ApiGameTarget:
    """Game target backed by the remote REST API; every call is a bearer-authenticated GET."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        test_mode: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._test_mode = test_mode
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "Remote API"

    def status(self) -> FireResponse:
        return _parse_fire_response(self._get("fire"))

    def fire(self, row: int, col: int) -> FireResponse:
        return _parse_fire_response(self._get(f"fire/{row}/{col}"))

    def fire_with_ability(self, row: int, col: int, ability: Ability) -> FireResponse:
        return _parse_fire_response(self._get(f"fire/{row}/{col}/avenger/{ability.value}"))

    def reset(self) -> int:
        """Start a new game; returns the number of tries left."""
        payload = self._get("reset")
        return int(payload.get("availableTries", 0))

    def _url(self, path: str) -> str:
        url = f"{self._base_url}/{path}"
        return f"{url}?test=yes" if self._test_mode else url

    def _get(self, path: str) -> dict[str, Any]:
        url = self._url(path)
        request = Request(url, headers={"Authorization": f"Bearer {self._token}"}, method="GET")
        logger.debug("api_request url=%s", url)
        try:
            with urlopen(request, timeout=self._timeout) as resp:  # noqa: S310
                raw = resp.read().decode("utf-8")
        except HTTPError as exc:
            logger.warning("api_error_response url=%s status=%s", url, exc.code)
            try:
                body = exc.read().decode("utf-8", errors="replace")
                logger.warning("api_error_body url=%s body=%s", url, body)
            except OSError:
                log_recoverable(logger, "api_error_body_unreadable")
            raise GameTargetError(f"Request to {path} failed with status {exc.code}.") from exc
        except URLError as exc:
            raise GameTargetError(f"Request to {path} failed: {exc.reason}.") from exc

        logger.debug("api_response url=%s body=%s", url, raw)
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise GameTargetError(f"Response from {path} is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise GameTargetError("Remote payload is not a JSON object.")
        return payload


def _parse_fire_response(payload: dict[str, Any]) -> FireResponse:
    reveals = tuple(
        Position(int(item["mapPoint"]["y"]), int(item["mapPoint"]["x"]))
        for item in payload.get("avengerResult", []) or []
        if isinstance(item, dict) and isinstance(item.get("mapPoint"), dict)
    )
    return FireResponse(
        grid=str(payload.get("grid", "")),
        cell=str(payload.get("cell", "") or ""),
        result=bool(payload.get("result", False)),
        ability_available=bool(payload.get("avengerAvailable", False)),
        map_id=int(payload.get("mapId", 0)),
        map_count=int(payload.get("mapCount", 0)),
        move_count=int(payload.get("moveCount", 0)),
        finished=bool(payload.get("finished", False)),
        ability_reveals=reveals,
    )
