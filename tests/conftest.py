import asyncio
import inspect
import os
import sys
import tempfile
from pathlib import Path

# Environment for the module-level app in authhub.main, set before any import
_test_tmp_dir = tempfile.mkdtemp(prefix="authhub_test_")
os.environ.setdefault("AUTHHUB_ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key-for-automated-tests-only-0123456789")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_test_tmp_dir}/default.db")
os.environ.setdefault("TRUSTED_HOSTS", "*")
os.environ.setdefault("HASH_TIME_COST", "1")
os.environ.setdefault("HASH_MEMORY_COST", "1024")
os.environ.setdefault("HASH_PARALLELISM", "1")
os.environ.setdefault("LOG_LEVEL", "WARNING")

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from authhub.auth.jwt import TokenSigner  # noqa: E402
from authhub.auth.password import SecretHasher  # noqa: E402
from authhub.core import database  # noqa: E402
from authhub.core.config import Settings  # noqa: E402

TEST_SIGNING_KEY = "test-signing-key-for-automated-tests-only-0123456789"


@pytest.fixture
def settings(tmp_path):
    """Settings with a temp-file database and cheap Argon2 parameters."""
    return Settings(
        environment="test",
        jwt_secret_key=TEST_SIGNING_KEY,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'authhub_test.db'}",
        hash_time_cost=1,
        hash_memory_cost=1024,
        hash_parallelism=1,
        trusted_hosts=["*"],
        log_level="WARNING",
    )


@pytest.fixture
def hasher(settings):
    return SecretHasher.from_settings(settings)


@pytest.fixture
def signer(settings):
    return TokenSigner(settings)


@pytest.fixture
def db_engine(settings):
    """Fresh schema in a temp SQLite file; torn down after the test."""
    database.init_engine(settings.database_url)
    asyncio.run(database.init_db())
    yield database.engine
    asyncio.run(database.close_db())


@pytest.fixture
def session_factory(db_engine):
    """Callable returning a new AsyncSession (use with `async with`)."""
    return database.get_session_maker()


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")
