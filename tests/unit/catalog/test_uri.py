import pytest

from modules.catalog.uri import CATALOG_BASE_URL_PLACEHOLDER, UriComposer

pytestmark = pytest.mark.unit


class TestUriComposer:
    def test_replaces_placeholder_with_base_url(self):
        composer = UriComposer("https://cdn.example.com/")
        uri = f"{CATALOG_BASE_URL_PLACEHOLDER}/images/products/1.png"
        assert (
            composer.compose_pic_uri(uri)
            == "https://cdn.example.com/images/products/1.png"
        )

    def test_uri_without_placeholder_is_unchanged(self):
        composer = UriComposer("https://cdn.example.com")
        assert (
            composer.compose_pic_uri("https://other.example.com/x.png")
            == "https://other.example.com/x.png"
        )
