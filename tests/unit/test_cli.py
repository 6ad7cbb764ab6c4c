"""Tests for CLI commands."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from seo_copilot.cli import app
from seo_copilot.models.llm import ProviderName
from seo_copilot.services.config_manager import REQUIRED_API_KEYS

runner = CliRunner()

REWRITE = "A clear and friendly rewrite of the draft, long enough to be kept."


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep CLI runs from reconfiguring structlog onto the runner's streams."""
    with patch("seo_copilot.cli.utils.configure_logging"):
        yield


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Environment with every provider key set."""
    for key in REQUIRED_API_KEYS:
        monkeypatch.setenv(key, "test-key")
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "cli-cache"))
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def scripted_cli(orchestrator_factory):
    """Patch the analysis commands onto a scripted orchestrator."""
    patchers = []

    def _build(replies, **kwargs):
        orchestrator, scripted = orchestrator_factory(replies, **kwargs)
        patcher = patch(
            "seo_copilot.cli.analyze.build_orchestrator", return_value=orchestrator
        )
        patcher.start()
        patchers.append(patcher)
        return orchestrator, scripted

    yield _build
    for patcher in patchers:
        patcher.stop()


class TestValidateEnv:
    def test_all_keys_present(self, env):
        result = runner.invoke(app, ["validate-env"])
        assert result.exit_code == 0
        assert "Environment is valid" in result.stdout
        assert "✓ claude" in result.stdout

    def test_missing_key_strict(self, env):
        env.delenv("PERPLEXITY_API_KEY")
        result = runner.invoke(app, ["validate-env"])
        assert result.exit_code == 1
        assert "PERPLEXITY_API_KEY" in result.stdout
        assert "✗ perplexity" in result.stdout

    def test_missing_key_lenient(self, env):
        env.delenv("OPENAI_API_KEY")
        result = runner.invoke(app, ["validate-env", "--lenient"])
        assert result.exit_code == 0

    def test_bad_config_file(self, env):
        result = runner.invoke(app, ["validate-env", "--config", "missing.yaml"])
        assert result.exit_code == 1
        assert "Configuration Error" in result.stdout

    def test_bad_environment_value(self, env):
        env.setenv("API_RETRIES", "many")
        result = runner.invoke(app, ["validate-env"])
        assert result.exit_code == 1
        assert "API_RETRIES" in result.stdout


class TestProviders:
    def test_json_status(self, env):
        env.setenv("ROUTER_DISABLED_PROVIDERS", "gemini")
        result = runner.invoke(app, ["providers", "--json"])

        assert result.exit_code == 0
        payload = result.stdout[result.stdout.index("[\n") :]
        status = {s["name"]: s for s in json.loads(payload)}
        assert status["gemini"]["available"] is False
        assert status["perplexity"]["inRouter"] is False

    def test_table(self, env):
        result = runner.invoke(app, ["providers"])
        assert result.exit_code == 0
        assert "fan-out only" in result.stdout
        assert "priority 1" in result.stdout


class TestAnalysisCommands:
    """Tests for the one-off analysis commands."""

    def test_competitors(self, scripted_cli, sample_replies):
        scripted_cli(
            {
                ProviderName.OPENAI: [sample_replies["competitor"]("a.com")],
                ProviderName.PERPLEXITY: [sample_replies["competitor"]("b.com")],
                ProviderName.CLAUDE: [{"gaps": ["pricing pages"]}],
            }
        )

        result = runner.invoke(app, ["competitors", "acme.io", "-k", "crm"])

        assert result.exit_code == 0
        assert "2 competitors, confidence 100" in result.stdout
        assert "pricing pages" in result.stdout

    def test_competitors_all_failed(self, scripted_cli):
        scripted_cli(
            {}, missing_keys=(ProviderName.OPENAI, ProviderName.PERPLEXITY)
        )
        result = runner.invoke(app, ["competitors", "acme.io", "-k", "crm"])
        assert result.exit_code == 1
        assert "Error [ALL_PROVIDERS_EXHAUSTED]" in result.stdout

    def test_content_json(self, scripted_cli, sample_replies, tmp_path):
        scripted_cli({ProviderName.OPENAI: [sample_replies["content"](seo=64)]})
        draft = tmp_path / "draft.md"
        draft.write_text("A short draft about CRM tools.")

        result = runner.invoke(
            app, ["content", str(draft), "--title", "CRM tools", "--json"]
        )

        assert result.exit_code == 0
        assert '"seo": 64' in result.stdout

    def test_content_missing_file(self, scripted_cli, tmp_path):
        scripted_cli({})
        result = runner.invoke(
            app, ["content", str(tmp_path / "nope.md"), "--title", "CRM"]
        )
        assert result.exit_code == 1
        assert "Cannot read" in result.stdout

    def test_enhance(self, scripted_cli, tmp_path):
        _, scripted = scripted_cli({ProviderName.CLAUDE: [f"ENHANCED CONTENT: {REWRITE}"]})
        draft = tmp_path / "draft.md"
        draft.write_text("Original draft.")

        result = runner.invoke(app, ["enhance", str(draft), "--mode", "human"])

        assert result.exit_code == 0
        assert REWRITE in result.stdout
        assert "Enhanced with claude" in result.stdout
        assert len(scripted[ProviderName.CLAUDE].calls) == 1

    def test_keywords(self, scripted_cli):
        scripted_cli(
            {ProviderName.CLAUDE: [{"keywords": [{"keyword": "best crm", "difficulty": 40}]}]}
        )
        result = runner.invoke(app, ["keywords", "crm", "--industry", "saas"])
        assert result.exit_code == 0
        assert "1 keywords" in result.stdout
        assert "best crm" in result.stdout


class TestCheck:
    def test_recommendations(self, scripted_cli, tmp_path):
        scripted_cli(
            {ProviderName.CLAUDE: [{"recommendations": ["Add an FAQ section", "add an faq section"]}]}
        )
        draft = tmp_path / "draft.md"
        draft.write_text("A short draft about CRM tools.")

        result = runner.invoke(
            app, ["check", str(draft), "--focus", "recommendations", "-k", "crm"]
        )

        assert result.exit_code == 0
        assert "recommendations check served by claude" in result.stdout
        assert result.stdout.count("Add an FAQ section") == 1

    def test_readability(self, scripted_cli, tmp_path):
        _, scripted = scripted_cli(
            {ProviderName.CLAUDE: [{"gradeLevel": 7, "suggestions": ["Split long sentences"]}]}
        )
        draft = tmp_path / "draft.md"
        draft.write_text("A short draft about CRM tools.")

        result = runner.invoke(app, ["check", str(draft)])

        assert result.exit_code == 0
        assert "grade_level" in result.stdout
        assert "- Split long sentences" in result.stdout
        assert "CRM tools" in scripted[ProviderName.CLAUDE].calls[0]["prompt"]
