import pytest
from papi_client.client import PapiClient
from papi_client.config import DEFAULT_TIMEOUT_SECONDS, create_client_from_env, load_env_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("PAPI_BASE_URL", "PAPI_USE_PREFIXES", "PAPI_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    cfg = load_env_config(use_dotenv=False)

    assert cfg.base_url == ""
    assert cfg.use_prefixes is True
    assert cfg.timeout_seconds == DEFAULT_TIMEOUT_SECONDS


def test_values_are_read_from_environment(clean_env):
    clean_env.setenv("PAPI_BASE_URL", " https://akab-host.luna.akamaiapis.net ")
    clean_env.setenv("PAPI_USE_PREFIXES", "false")
    clean_env.setenv("PAPI_TIMEOUT_SECONDS", "2.5")

    cfg = load_env_config(use_dotenv=False)

    assert cfg.base_url == "https://akab-host.luna.akamaiapis.net"
    assert cfg.use_prefixes is False
    assert cfg.timeout_seconds == 2.5


def test_bad_timeout_is_rejected(clean_env):
    clean_env.setenv("PAPI_TIMEOUT_SECONDS", "soon")
    with pytest.raises(ValueError, match="PAPI_TIMEOUT_SECONDS"):
        load_env_config(use_dotenv=False)


@pytest.mark.asyncio
async def test_client_from_env(clean_env):
    clean_env.setenv("PAPI_BASE_URL", "https://mock-papi.com")
    clean_env.setenv("PAPI_USE_PREFIXES", "0")

    client = create_client_from_env()
    try:
        assert isinstance(client, PapiClient)
        assert client.base_url == "https://mock-papi.com"
        assert client.use_prefixes is False
    finally:
        await client.aclose()


def test_missing_base_url_raises(clean_env):
    clean_env.setenv("PAPI_BASE_URL", "")
    with pytest.raises(ValueError, match="PAPI_BASE_URL"):
        PapiClient.from_env()
