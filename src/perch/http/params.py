"""Multi-valued parameter mappings for query strings and URL-encoded forms.

Both are parsed with stdlib ``urllib.parse``; no extra dependency.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class MultiParams(Mapping[str, str]):
    """Read-only ``name -> [values]`` mapping.

    ``__getitem__`` returns the first value, ``get_list`` returns all
    of them (checkboxes, repeated query keys).
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, list[str]] | None = None) -> None:
        object.__setattr__(self, "_data", data or {})

    @classmethod
    def parse(cls, raw: bytes | str) -> MultiParams:
        text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
        return cls(parse_qs(text, keep_blank_values=True))

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))


class QueryParams(MultiParams):
    """Parsed query string."""


class FormData(MultiParams):
    """Parsed ``application/x-www-form-urlencoded`` body."""
