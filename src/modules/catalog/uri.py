"""Picture URI composition."""

from __future__ import annotations

CATALOG_BASE_URL_PLACEHOLDER = "http://catalogbaseurltobereplaced"


class UriComposer:
    """Resolves the catalog base-URL placeholder stored in picture URIs."""

    def __init__(self, catalog_base_url: str) -> None:
        self._catalog_base_url = catalog_base_url.rstrip("/")

    def compose_pic_uri(self, uri_template: str) -> str:
        return uri_template.replace(CATALOG_BASE_URL_PLACEHOLDER, self._catalog_base_url)
