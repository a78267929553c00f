import pytest

from config import Settings
from database import init_db, make_engine, make_session_factory
from state_store import StateStore
from triggers import ThemeManager

from fakes import FakeClock, FakeHttpClient


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ADMIN_API_URL="https://admin.example.com/api",
        GITHUB_REPO="vendor/barebones-theme",
        SITE_URL="https://site.example.com",
        THEME_SLUG="barebones",
        THEME_VERSION="1.3.0",
        PLATFORM_VERSION="6.5.2",
        ACTIVE_PLUGINS=["akismet/akismet.php", "hello.php"],
        DATABASE_URL="sqlite://",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    engine = make_engine("sqlite://")
    init_db(engine)
    return StateStore(make_session_factory(engine), clock=clock)


@pytest.fixture
def http():
    return FakeHttpClient()


@pytest.fixture
def manager(settings, store, http):
    return ThemeManager(settings, store, http)
