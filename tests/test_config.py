"""Tests for settings, prompts and the offline CLI commands."""

import pytest
from click.testing import CliRunner
from pydantic import ValidationError

from config.defaults import EXPORT_COLUMNS, default_sync_config
from config.manager import ConfigManager
from config.schema import SyncConfig
from config import wizard
from main import cli


# ─── Settings ─────────────────────────────────────────────────────────────────

class TestSyncConfig:
    def test_defaults(self):
        config = default_sync_config()
        assert config.page_size == 50
        assert config.trainee_page_size == 100
        assert config.token_duration == 60000
        assert config.request_timeout_seconds is None
        assert config.export_dir == "."

    def test_blank_urls_become_none(self):
        config = SyncConfig(site_url="  ", scim_base_url="")
        assert config.site_url is None
        assert config.scim_base_url is None

    @pytest.mark.parametrize("size", [0, 501])
    def test_page_size_bounds(self, size):
        with pytest.raises(ValidationError):
            SyncConfig(page_size=size)


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert ConfigManager().load(tmp_path / "none.yaml") == default_sync_config()

    def test_save_and_load_round_trip(self, tmp_path):
        path = tmp_path / "sync_config.yaml"
        config = SyncConfig(site_url="https://acme.example.com/acme",
                            username="jane", page_size=25)
        mgr = ConfigManager()
        mgr.save(config, path)

        text = path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "never stored" in text
        assert mgr.load(path) == config

    def test_invalid_file_raises_value_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("page_size: 0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid settings file"):
            ConfigManager().load(path)

    def test_first_run_check(self, tmp_path, monkeypatch):
        monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG", tmp_path / "sync_config.yaml")
        mgr = ConfigManager()
        assert mgr.first_run_check()
        mgr.save(SyncConfig())
        assert not mgr.first_run_check()


# ─── Prompts ──────────────────────────────────────────────────────────────────

class TestPrompts:
    def test_prompt_login_masks_secrets_and_retries_bad_url(self, monkeypatch):
        answers = iter([
            "not a url",                        # rejected site URL
            "https://acme.example.com/acme",
            "",                                 # blank username, asked again
            "jane",
            "secret",
            "api-key",
        ])
        asked = []

        def fake_ask(label, default=None, password=False, **kwargs):
            asked.append((label, password))
            return next(answers)

        monkeypatch.setattr(wizard.Prompt, "ask", fake_ask)
        login = wizard.prompt_login(SyncConfig())

        assert login.site_url == "https://acme.example.com/acme"
        assert login.username == "jane"
        assert login.password == "secret"
        assert login.api_key == "api-key"
        assert ("Password", True) in asked
        assert ("Identity API key", True) in asked
        assert "secret" not in repr(login)

    def test_prompt_login_offers_stored_defaults(self, monkeypatch):
        defaults = {}

        def fake_ask(label, default=None, password=False, **kwargs):
            defaults[label] = default
            return default or "x"

        monkeypatch.setattr(wizard.Prompt, "ask", fake_ask)
        config = SyncConfig(site_url="https://acme.example.com/acme", username="jane")
        login = wizard.prompt_login(config)

        assert login.site_url == "https://acme.example.com/acme"
        assert login.username == "jane"
        assert defaults["Password"] is None


# ─── CLI (offline commands) ───────────────────────────────────────────────────

class TestCli:
    def test_template_writes_header(self, tmp_path):
        out = tmp_path / "template.csv"
        result = CliRunner().invoke(cli, ["template", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8").strip() == ",".join(EXPORT_COLUMNS)

    def test_validate_rejects_missing_columns(self, tmp_path):
        path = tmp_path / "in.csv"
        path.write_text("Title,Description\nA,B\n", encoding="utf-8")
        result = CliRunner().invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Provider" in result.output

    def test_validate_accepts_template(self, tmp_path):
        out = tmp_path / "template.csv"
        runner = CliRunner()
        runner.invoke(cli, ["template", "-o", str(out)])
        result = runner.invoke(cli, ["validate", str(out)])
        assert result.exit_code == 0
        assert "Looks importable" in result.output

    def test_bare_invocation_runs_interactive_session(self, monkeypatch):
        import main
        ran = []
        monkeypatch.setattr(main, "_login_or_abort", lambda config: "client")
        monkeypatch.setattr(wizard, "prompt_action", lambda: wizard.ACTION_EXPORT)
        monkeypatch.setattr(main, "_run_export",
                            lambda client, config: ran.append(client))

        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert ran == ["client"]
