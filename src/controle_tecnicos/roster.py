"""Technician roster loading."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Protocol

from controle_tecnicos.exceptions import RosterInvalid, RosterNotFound
from controle_tecnicos.models import RosterEntry

ADDRESS_FIELD = "ENDEREÇO/RESIDENCIA"


class RosterProvider(Protocol):
    def load(self) -> list[RosterEntry]:
        """Return a fresh snapshot of the roster."""
        ...

    def validate(self) -> None:
        """Raise if the roster source is unusable."""
        ...


class CsvRosterProvider:
    """
    Reads the roster CSV on every ``load()`` call.

    The file is never cached or written, so edits show up on the next
    request. Columns other than the address column pass through untouched.
    """

    def __init__(
        self,
        path: str | Path,
        address_field: str = ADDRESS_FIELD,
        delimiter: str = ",",
    ):
        self._path = Path(path)
        self._address_field = address_field
        self._delimiter = delimiter

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[RosterEntry]:
        if not self._path.is_file():
            raise RosterNotFound(str(self._path))

        with self._path.open(newline="", encoding="utf-8-sig") as fh:
            reader = csv.DictReader(fh, delimiter=self._delimiter)
            if reader.fieldnames is None:
                raise RosterInvalid(str(self._path), "file is empty")
            if self._address_field not in reader.fieldnames:
                raise RosterInvalid(
                    str(self._path),
                    f"missing column '{self._address_field}'",
                )
            return [
                RosterEntry(address=(row.get(self._address_field) or ""), fields=row)
                for row in reader
            ]

    def validate(self) -> None:
        """Raise RosterNotFound / RosterInvalid if the file is unusable."""
        self.load()


class StaticRosterProvider:
    """Roster held in memory, e.g. built by an embedding application."""

    def __init__(self, entries: list[RosterEntry]):
        self._entries = list(entries)

    def load(self) -> list[RosterEntry]:
        return list(self._entries)

    def validate(self) -> None:
        return None
