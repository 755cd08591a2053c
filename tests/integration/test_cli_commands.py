"""CLI command tests using Typer's runner with mocked providers."""

from __future__ import annotations

from pathlib import Path
import zipfile

import pytest
from typer.testing import CliRunner

from neonbuilder.cli import app
from neonbuilder.credentials import FileCredentialStore
from neonbuilder.llm.openai_client import OpenAIChatClient
from neonbuilder.models.datatypes import ChatCompletion, Usage


@pytest.fixture
def _mock_chat_completion(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, object]]:
    """Replace OpenAI chat completions with deterministic text."""

    calls: list[dict[str, object]] = []

    def _fake_chat_completion(self, **kwargs: object) -> ChatCompletion:
        _ = self
        calls.append(kwargs)
        return ChatCompletion(text=f"chunk {len(calls)}", usage=Usage(100, 50, 150))

    monkeypatch.setattr(OpenAIChatClient, "chat_completion", _fake_chat_completion)
    return calls


def test_build_command_runs_selected_section(  # type: ignore[no-untyped-def]
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, _mock_chat_completion
) -> None:
    """Build should generate the section, print progress, and summarize outputs."""

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env-key")
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "build",
            "--out",
            str(tmp_path),
            "--root-folder",
            "Demo",
            "--section",
            "launch_emails",
            "--chunks",
            "launch_emails=2",
            "--no-pdf",
            "--model",
            "gpt-4o-mini",
            "--yes",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "[progress] 1/2 section=launch_emails chunk=1/2" in result.output
    assert "[progress] 2/2 section=launch_emails chunk=2/2" in result.output
    assert "Build complete." in result.output
    assert "Model: gpt-4o-mini" in result.output
    master = tmp_path / "Demo" / "Demo_complete.zip"
    with zipfile.ZipFile(master) as zipped:
        assert zipped.namelist() == ["launch_emails.zip"]
    assert len(_mock_chat_completion) == 2
    assert _mock_chat_completion[0]["model"] == "gpt-4o-mini"


def test_build_command_reads_yaml_config(  # type: ignore[no-untyped-def]
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, _mock_chat_completion
) -> None:
    """YAML values should apply unless the CLI overrides them."""

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env-key")
    config_path = tmp_path / "neon.yaml"
    config_path.write_text(
        f"output_dir: {tmp_path.as_posix()}\n"
        "root_folder: FromYaml\n"
        "generate_pdfs: false\n"
        "selected_sections: [branding]\n"
        "chunk_overrides:\n"
        "  branding: 1\n",
        encoding="utf-8",
    )

    result = CliRunner().invoke(app, ["build", "--config", str(config_path), "--yes"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "FromYaml" / "FromYaml_complete.zip").is_file()


def test_build_command_without_api_key_fails() -> None:
    """Missing credentials should fail at the credentials stage with exit code 1."""

    result = CliRunner().invoke(app, ["build", "--no-pdf", "--yes"])

    assert result.exit_code == 1
    assert "build failed at stage `credentials`" in result.output
    assert "Hint:" in result.output


def test_build_command_reports_invalid_options() -> None:
    """Invalid option values should fail at the config stage."""

    result = CliRunner().invoke(
        app, ["build", "--section", "nope", "--no-pdf", "--yes", "--api-key", "sk-x"]
    )

    assert result.exit_code == 1
    assert "build failed at stage `config`" in result.output
    assert "Unknown section ID: nope" in result.output


def test_build_command_reports_missing_config_file(tmp_path: Path) -> None:
    """A missing YAML path should be reported as a config error."""

    result = CliRunner().invoke(
        app, ["build", "--config", str(tmp_path / "missing.yaml"), "--yes"]
    )

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_build_command_uses_and_stores_cli_api_key(  # type: ignore[no-untyped-def]
    tmp_path: Path, _mock_chat_completion
) -> None:
    """`--api-key` should be used and persisted unless `--no-store-api-key` is set."""

    result = CliRunner().invoke(
        app,
        [
            "build",
            "--out",
            str(tmp_path / "out"),
            "--section",
            "branding",
            "--chunks",
            "branding=1",
            "--no-pdf",
            "--yes",
            "--api-key",
            "sk-cli-key",
        ],
    )

    assert result.exit_code == 0, result.output
    store = FileCredentialStore(config_dir=tmp_path / "neon-config")
    assert store.get_api_key() == "sk-cli-key"


def test_interactive_prompt_rejects_malformed_key() -> None:
    """A prompted key must start with `sk-`."""

    result = CliRunner().invoke(
        app,
        ["build", "--interactive", "--no-pdf"],
        input="\n" * 10 + "n\n" + "not-a-key\n",
    )

    assert result.exit_code == 1
    assert "API key should start with `sk-`" in result.output


def test_sections_command_lists_catalog() -> None:
    """Sections command should list every section and the default total."""

    result = CliRunner().invoke(app, ["sections"])

    assert result.exit_code == 0
    assert "core_prompts (12 chunks): Core Edition Prompts" in result.output
    assert "Total default chunks: 55" in result.output


def test_credentials_command_set_status_clear(tmp_path: Path) -> None:
    """Credentials command should store, report, and clear the file-backed key."""

    runner = CliRunner()

    set_result = runner.invoke(app, ["credentials", "--set-api-key"], input="sk-stored-key\n")
    assert set_result.exit_code == 0, set_result.output
    assert FileCredentialStore(config_dir=tmp_path / "neon-config").get_api_key() == "sk-stored-key"

    status_result = runner.invoke(app, ["credentials"])
    assert "Stored OpenAI API key: present" in status_result.output

    clear_result = runner.invoke(app, ["credentials", "--clear-api-key"])
    assert "Stored API key cleared" in clear_result.output

    conflict = runner.invoke(app, ["credentials", "--set-api-key", "--clear-api-key"])
    assert conflict.exit_code == 1


def test_models_command_lists_gpt_models(monkeypatch: pytest.MonkeyPatch) -> None:
    """Models command should print provider model ids."""

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env-key")
    monkeypatch.setattr(OpenAIChatClient, "list_models", lambda self: ["gpt-4", "gpt-4o"])

    result = CliRunner().invoke(app, ["models"])

    assert result.exit_code == 0
    assert "gpt-4o" in result.output
    assert "Total models: 2" in result.output


def test_archive_stats_and_extract_commands(tmp_path: Path) -> None:
    """Archive utilities should report stats and extract files."""

    archive_path = tmp_path / "sample.zip"
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zipped:
        zipped.writestr("docs/readme.txt", "neon " * 100)

    runner = CliRunner()
    stats_result = runner.invoke(app, ["archive-stats", str(archive_path)])
    assert stats_result.exit_code == 0
    assert "Files: 1" in stats_result.output
    assert "docs/readme.txt" in stats_result.output

    extract_result = runner.invoke(app, ["extract", str(archive_path), str(tmp_path / "out")])
    assert extract_result.exit_code == 0
    assert "Extracted files: 1" in extract_result.output
    assert (tmp_path / "out" / "docs" / "readme.txt").is_file()

    missing = runner.invoke(app, ["archive-stats", str(tmp_path / "missing.zip")])
    assert missing.exit_code == 1
