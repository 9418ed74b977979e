import pydantic
import pytest

from files_gateway.config.settings import get_settings, load_settings
from files_gateway.errors import ConfigurationError
from tests.consts import TEST_ENDPOINT_URL, TEST_ENV

REQUIRED_ENV_VARS = tuple(TEST_ENV)


def test_defaults(aws_env):
    settings = load_settings(_env_file=None)

    assert settings.aws_endpoint_url == TEST_ENDPOINT_URL
    assert settings.s3_bucket_name == "default"
    assert settings.max_multipart_memory == 8 * 1024 * 1024
    assert settings.port == 8080
    assert settings.log_level == "INFO"


@pytest.mark.parametrize("missing", REQUIRED_ENV_VARS)
def test_missing_required_variable(aws_env, monkeypatch, missing):
    monkeypatch.delenv(missing)

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env_file=None)

    assert missing in exc_info.value.message
    others = [name for name in REQUIRED_ENV_VARS if name != missing]
    assert not any(name in exc_info.value.message for name in others)


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_required_variable(aws_env, monkeypatch, blank):
    monkeypatch.setenv("AWS_REGION", blank)

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings(_env_file=None)

    assert "AWS_REGION" in exc_info.value.message


def test_values_are_stripped(aws_env, monkeypatch):
    monkeypatch.setenv("AWS_REGION", "  eu-west-1 ")
    assert load_settings(_env_file=None).aws_region == "eu-west-1"


def test_log_level_is_validated(aws_env, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert load_settings(_env_file=None).log_level == "DEBUG"

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None)


def test_settings_are_immutable(aws_env):
    settings = load_settings(_env_file=None)
    with pytest.raises(pydantic.ValidationError):
        settings.s3_bucket_name = "other"


def test_get_settings_is_cached(aws_env):
    assert get_settings() is get_settings()
