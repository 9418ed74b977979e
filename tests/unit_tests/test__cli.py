from click.testing import CliRunner

from files_gateway import cli as cli_module
from tests.consts import TEST_ENDPOINT_URL


def test_show_config_masks_secret(aws_env, monkeypatch):
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "super-secret-value")

    result = CliRunner().invoke(cli_module.cli, ["show-config"])

    assert result.exit_code == 0
    assert TEST_ENDPOINT_URL in result.output
    assert "S3 Bucket: default" in result.output
    assert "super-secret-value" not in result.output


def test_serve_exits_when_configuration_is_missing(aws_env, monkeypatch):
    monkeypatch.delenv("AWS_ENDPOINT_URL")

    result = CliRunner().invoke(cli_module.cli, ["serve"])

    assert result.exit_code == 1


def test_serve_runs_uvicorn_with_configured_port(aws_env, monkeypatch):
    calls = {}

    def fake_run(app, host, port, log_level):
        calls.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr("uvicorn.run", fake_run)

    result = CliRunner().invoke(cli_module.cli, ["serve", "--port", "9090"])

    assert result.exit_code == 0, result.output
    assert calls["port"] == 9090
    assert calls["host"] == "0.0.0.0"
    assert calls["app"].state.settings.s3_bucket_name == "default"
