"""Header mapping and header file utilities.

Header names compare case-insensitively but are stored with the case they
were first given, so requests echo back the way the user wrote them.
"""

from collections.abc import MutableMapping
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

HeaderSource = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


class HeaderMap(MutableMapping):
    """Case-insensitive, case-preserving header mapping.

    The first spelling of a name wins; later assignments that differ only in
    case replace the value but keep the stored spelling.
    """

    def __init__(self, headers: HeaderSource = None):
        self._store: Dict[str, str] = {}
        self._index: Dict[str, str] = {}
        if headers is not None:
            items = headers.items() if isinstance(headers, Mapping) else headers
            for name, value in items:
                self[name] = value

    def __getitem__(self, name: str) -> str:
        return self._store[self._index[name.lower()]]

    def __setitem__(self, name: str, value: str) -> None:
        key = self._index.setdefault(name.lower(), name)
        self._store[key] = value

    def __delitem__(self, name: str) -> None:
        key = self._index.pop(name.lower())
        del self._store[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._index

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderMap):
            return self._store == other._store
        if isinstance(other, Mapping):
            return self._store == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"HeaderMap({self._store!r})"

    def copy(self) -> "HeaderMap":
        """Return a shallow clone."""
        return HeaderMap(self._store)

    def remove(self, name: str) -> Optional[str]:
        """Remove a header if present and return its value."""
        if name not in self:
            return None
        value = self[name]
        del self[name]
        return value


def normalize_header_names(headers: Mapping[str, str], raw_names: Iterable[str]) -> Dict[str, str]:
    """Restore header name casing from a list of raw names.

    Args:
        headers: Header mapping, typically with lower-cased keys
        raw_names: Header names as they appeared on the wire or in the request

    Returns:
        New dictionary whose keys take the case of the first raw name matching
        them case-insensitively; keys with no raw counterpart are kept as-is
    """
    spellings: Dict[str, str] = {}
    for raw in raw_names:
        spellings.setdefault(raw.lower(), raw)

    return {spellings.get(name.lower(), name): value for name, value in headers.items()}


def load_headers_from_file(header_file: str) -> Dict[str, str]:
    """Load HTTP headers from file.

    File format is simple key: value pairs, one per line.

    Args:
        header_file: Path to header file

    Returns:
        Dictionary of header name to value

    Example file format:
        Accept: application/json
        Authorization: Basic alice:secret
        X-Custom-Header: value
    """
    headers = {}
    header_path = Path(header_file)

    if not header_path.exists():
        return headers

    with open(header_path, 'r') as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith('#'):
                continue

            if ':' in line:
                name, value = line.split(':', 1)
                headers[name.strip()] = value.strip()

    return headers


def parse_header_line(line: str) -> Tuple[str, str]:
    """Split a ``Name: value`` string.

    Raises:
        ValueError: If the line has no colon or an empty name
    """
    name, sep, value = line.partition(':')
    if not sep or not name.strip():
        raise ValueError(f"Invalid header: {line!r}")
    return name.strip(), value.strip()
