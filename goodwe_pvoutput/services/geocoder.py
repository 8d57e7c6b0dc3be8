from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Tuple

import requests

from goodwe_pvoutput.config import LocationConfig


Coordinates = Tuple[float, float]


class GeocodingError(Exception):
    """The location string could not be turned into coordinates."""


class LocationCache:
    """JSON file mapping location strings to ``[latitude, longitude]``."""

    def __init__(self, path: str | Path, log):
        self.path = Path(path).expanduser()
        self.log = log

    def load(self) -> Dict[str, Coordinates]:
        self.log.debug("Loading location cache from %s", self.path)
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Location cache {self.path} is not a JSON object")
        try:
            return {name: (float(coords[0]), float(coords[1])) for name, coords in data.items()}
        except (IndexError, KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Location cache {self.path} has a malformed entry: {exc}") from exc

    def save(self, cache: Dict[str, Coordinates]) -> None:
        self.log.debug("Saving location cache %s to %s", cache, self.path)
        payload = {name: [lat, lon] for name, (lat, lon) in cache.items()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


class Geocoder:
    """Resolve a location to coordinates via config, cache, or Nominatim."""

    def __init__(self, cfg: LocationConfig, log, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.log = log
        self.session = session or requests.Session()
        self.cache = LocationCache(cfg.cache_path, log)

    # ------------------------------------------------------------------
    def geocode(self, location: str) -> Coordinates:
        params = {"q": location, "format": "json", "limit": "1"}
        try:
            resp = self.session.get(
                self.cfg.geocoder_url,
                params=params,
                headers={"User-Agent": self.cfg.user_agent},
                timeout=self.cfg.timeout,
            )
            resp.raise_for_status()
            results = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise GeocodingError(f"geocoding '{location}' failed: {exc}") from exc

        if not isinstance(results, list) or not results:
            raise GeocodingError(f"location not found: {location}")

        first = results[0]
        try:
            return float(first["lat"]), float(first["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError(f"unexpected geocoder result for '{location}': {first}") from exc

    # ------------------------------------------------------------------
    def resolve(self) -> Coordinates:
        if self.cfg.has_coordinates:
            return self.cfg.latitude, self.cfg.longitude

        location = self.cfg.name
        if not location:
            raise GeocodingError("no location or coordinates configured")

        try:
            cache = self.cache.load()
        except (OSError, ValueError) as exc:
            self.log.warning("Ignoring unreadable location cache %s: %s", self.cache.path, exc)
            cache = {}

        if location in cache:
            return cache[location]

        self.log.debug("Geocoding location: %s", location)
        coords = self.geocode(location)
        cache[location] = coords
        try:
            self.cache.save(cache)
        except OSError as exc:
            self.log.error("Error saving location cache: %s", exc)
        return coords
