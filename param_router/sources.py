"""
Source bags - named key/value views over request data.

The verifier only needs get(key) and keys(); it never touches the Flask
request directly. request_sources() builds the standard bags:

    body     JSON object body, else form fields
    query    query string (request.args)
    params   path parameters (request.view_args)
    cookies  request cookies
    headers  request headers (not in the default order)
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from werkzeug.datastructures import MultiDict


RawValue = Union[str, List[str], Any]


class SourceBag(Protocol):
    """Read-only capability over one named source of request data."""

    def get(self, key: str) -> Optional[RawValue]:
        ...

    def keys(self) -> Iterable[str]:
        ...


class MappingBag:
    """Bag over a plain mapping (JSON body, view args)."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data = data or {}

    def get(self, key: str) -> Optional[RawValue]:
        return self._data.get(key)

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())

    def __repr__(self):
        return f"MappingBag({dict(self._data)!r})"


class MultiDictBag:
    """
    Bag over a werkzeug MultiDict (query string, form, cookies).

    Repeated keys come back as a list, single keys as a plain string.
    """

    def __init__(self, data: Optional[MultiDict] = None):
        self._data = data if data is not None else MultiDict()

    def get(self, key: str) -> Optional[RawValue]:
        values = self._data.getlist(key)
        if not values:
            return None
        return values if len(values) > 1 else values[0]

    def keys(self) -> Iterable[str]:
        return list(self._data.keys())

    def __repr__(self):
        return f"MultiDictBag({self._data!r})"


def _body_bag(request) -> SourceBag:
    body = request.get_json(silent=True) if request.is_json else None
    if isinstance(body, Mapping):
        return MappingBag(body)
    return MultiDictBag(request.form)


def request_sources(request) -> Dict[str, SourceBag]:
    """
    Build the named source bags for a Flask request.

    Args:
        request: Flask/werkzeug request object

    Returns:
        Map of bag name -> SourceBag
    """
    return {
        "body": _body_bag(request),
        "query": MultiDictBag(request.args),
        "params": MappingBag(request.view_args),
        "cookies": MultiDictBag(request.cookies),
        "headers": MappingBag(dict(request.headers)),
    }
