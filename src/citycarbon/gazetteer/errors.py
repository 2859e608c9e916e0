"""Gazetteer error types."""

from __future__ import annotations


class GazetteerError(ValueError):
    """Reference data could not be turned into a usable gazetteer."""


class DuplicateIdConflict(GazetteerError):
    """Two or more records share an id and the active policy refuses to pick one."""

    def __init__(self, city_ids: list[str]):
        self.city_ids = list(city_ids)
        super().__init__("Duplicate city ids in gazetteer: " + ", ".join(self.city_ids))


class CityNotFound(LookupError):
    """A caller required a city id that the gazetteer does not contain."""

    def __init__(self, city_id: str):
        self.city_id = city_id
        super().__init__(f"Unknown city id: '{city_id}'")
