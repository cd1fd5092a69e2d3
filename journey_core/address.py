from __future__ import annotations
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class AddressBar:
    """Query-string view of a page URL plus the document language attribute."""

    def __init__(self, url: str = "/", document_lang: Optional[str] = None) -> None:
        parts = urlsplit(url)
        self._base = (parts.scheme, parts.netloc, parts.path or "/")
        self._fragment = parts.fragment
        self._params: dict[str, str] = dict(parse_qsl(parts.query, keep_blank_values=True))
        self.document_lang = document_lang

    def get(self, name: str) -> Optional[str]:
        return self._params.get(name)

    def set(self, name: str, value: str) -> None:
        self._params[name] = str(value)

    def delete(self, name: str) -> None:
        self._params.pop(name, None)

    @property
    def url(self) -> str:
        query = urlencode(self._params)
        return urlunsplit((*self._base, query, self._fragment))

    def __repr__(self) -> str:
        return f"AddressBar({self.url!r}, document_lang={self.document_lang!r})"
