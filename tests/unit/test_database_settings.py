import pytest
from django.conf import settings

from config.settings import database_options

pytestmark = pytest.mark.unit


class TestDatabaseOptions:
    def test_postgres_bounds_connect_and_statements(self):
        options = database_options("django.db.backends.postgresql", 5)

        assert options == {
            "connect_timeout": 5,
            "options": "-c statement_timeout=5000",
        }

    def test_sqlite_bounds_lock_wait(self):
        assert database_options("django.db.backends.sqlite3", 3) == {"timeout": 3}

    def test_other_engines_get_no_driver_options(self):
        assert database_options("django.db.backends.mysql", 5) == {}

    def test_default_database_carries_store_timeout(self):
        default = settings.DATABASES["default"]

        assert default["ENGINE"] == "django.db.backends.sqlite3"
        assert default["OPTIONS"]["timeout"] == settings.ORDER_STORE_TIMEOUT
