"""End-to-end tests for the buildsmith command line."""

import json

import pytest

from buildsmith import run
from constants import Constants, EnvVars, ExitCodes

_ENV_VARS = [
    "ENABLE_MULTIPLATFORM_BUILD", "ENABLE_DYNAMIC_INSTALL", "ENABLE_CHECKERS",
    "PLATFORM_NAME", "PLATFORM_VERSION",
    "NODE_VERSION", "NODEJS_VERSION", "PYTHON_VERSION", "DOTNET_VERSION", "PHP_VERSION",
    "DISABLE_NODE_BUILD", "DISABLE_NODEJS_BUILD", "DISABLE_PYTHON_BUILD",
    "DISABLE_DOTNET_BUILD", "DISABLE_PHP_BUILD",
] + list(EnvVars.HOOK_VARS)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv(EnvVars.LOG_LEVEL, "WARNING")


@pytest.fixture
def node_app(tmp_path):
    app = tmp_path / "app"
    app.mkdir()
    (app / "package.json").write_text(
        json.dumps({"engines": {"node": "12"}, "scripts": {"build": "tsc", "setup": "npm install -g gulp"}}),
        encoding="utf-8",
    )
    return app


def _temp(tmp_path):
    return ["--temp-dir", str(tmp_path / "tmp")]


def test_script_to_stdout(node_app, tmp_path, capsys):
    code = run(["script", str(node_app), "-o", str(tmp_path / "out")] + _temp(tmp_path))
    out = capsys.readouterr().out
    assert code == ExitCodes.SUCCESS.value
    assert out.startswith("#!/bin/bash")
    assert "node=12.22.12" in out
    assert 'node_version="12.22.12"' in out


def test_script_to_file_with_checker_messages(node_app, tmp_path, capsys):
    target = tmp_path / "build.sh"
    code = run(
        ["script", str(node_app), "--output", str(target), "--enable-checkers"] + _temp(tmp_path)
    )
    captured = capsys.readouterr()
    assert code == ExitCodes.SUCCESS.value
    assert target.read_text(encoding="utf-8").startswith("#!/bin/bash")
    assert "outdated version of Node.js" in captured.err
    assert "npm install -g" in captured.err


def test_detect(node_app, tmp_path, capsys):
    assert run(["detect", str(node_app)] + _temp(tmp_path)) == ExitCodes.SUCCESS.value
    assert capsys.readouterr().out.strip() == "nodejs=12.22.12"


def test_dockerfile(node_app, tmp_path, capsys):
    assert run(["dockerfile", str(node_app)] + _temp(tmp_path)) == ExitCodes.SUCCESS.value
    out = capsys.readouterr().out
    assert out.startswith("ARG RUNTIME=node:12.22.12")
    assert f"FROM {Constants.BUILD_IMAGE}:slim AS build" in out


def test_platforms(capsys):
    assert run(["platforms"]) == ExitCodes.SUCCESS.value
    out = capsys.readouterr().out
    assert out.splitlines()[0].startswith("dotnet (enabled):")


def test_unsupported_platform_exit_code(node_app, tmp_path, capsys):
    code = run(["script", str(node_app), "--platform", "ruby"] + _temp(tmp_path))
    assert code == ExitCodes.RESOLUTION_ERROR.value
    assert "'ruby' platform is not supported" in capsys.readouterr().err


def test_version_without_platform_is_invalid_usage(node_app, tmp_path, capsys):
    code = run(["script", str(node_app), "--platform-version", "12"] + _temp(tmp_path))
    assert code == ExitCodes.INVALID_USAGE.value


def test_invalid_boolean_flag(node_app, tmp_path):
    code = run(["script", str(node_app), "--enable-checkers", "maybe"] + _temp(tmp_path))
    assert code == ExitCodes.INVALID_USAGE.value


def test_missing_source_dir(tmp_path, capsys):
    code = run(["script", str(tmp_path / "missing")] + _temp(tmp_path))
    assert code == ExitCodes.FILE_ERROR.value


def test_malformed_manifest_is_resolution_error(tmp_path, capsys):
    app = tmp_path / "app"
    app.mkdir()
    (app / "package.json").write_text("{oops", encoding="utf-8")
    code = run(["script", str(app)] + _temp(tmp_path))
    assert code == ExitCodes.RESOLUTION_ERROR.value
    assert "package.json" in capsys.readouterr().err


def test_temp_dir_cleaned_up(node_app, tmp_path):
    run(["detect", str(node_app)] + _temp(tmp_path))
    assert list((tmp_path / "tmp").iterdir()) == []


def test_undecodable_manifest_is_resolution_error(tmp_path, capsys):
    app = tmp_path / "app"
    app.mkdir()
    (app / "package.json").write_bytes(b'{"name": "\xff\xfe"}')
    code = run(["script", str(app)] + _temp(tmp_path))
    err = capsys.readouterr().err
    assert code == ExitCodes.RESOLUTION_ERROR.value
    assert "package.json" in err
    assert Constants.GENERIC_ERROR_MESSAGE not in err


def test_invalid_property_is_invalid_usage(node_app, tmp_path):
    code = run(["script", str(node_app), "-p", "compress_virtualenv=rar"] + _temp(tmp_path))
    assert code == ExitCodes.INVALID_USAGE.value
