import pytest

from career_vault import CryptoConfig, FieldEncryptor, KeyCache

TEST_SECRET = "test-secret-please-rotate"
# Low scrypt cost keeps the suite fast; the format is unchanged.
TEST_SCRYPT_N = 1024


class FakeClock:
    """Manually advanced monotonic clock."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config():
    return CryptoConfig(secret=TEST_SECRET, scrypt_n=TEST_SCRYPT_N)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def key_cache(config, clock):
    return KeyCache.from_config(config, clock=clock)


@pytest.fixture
def encryptor(key_cache):
    return FieldEncryptor(key_cache=key_cache)
