from __future__ import annotations

from ideaforge.apps import diagnostics_cli
from ideaforge.core.config.loader import config_from_mapping


def _cfg(**providers):
    return config_from_mapping({"providers": providers})


def test_diag_validate_config_output(monkeypatch, capsys):
    monkeypatch.setattr(diagnostics_cli, "load_app_config", lambda instance_path=None: _cfg(preferred="gemini"))
    monkeypatch.setattr("sys.argv", ["ideaforge-diag", "--validate-config"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "config-valid instance=ideaforge env=dev preferred=gemini" in out


def test_diag_invalid_config_exits_nonzero(monkeypatch, capsys):
    def _broken(instance_path=None):
        raise ValueError("Invalid IdeaForge configuration: bad")

    monkeypatch.setattr(diagnostics_cli, "load_app_config", _broken)
    monkeypatch.setattr("sys.argv", ["ideaforge-diag", "--validate-config"])
    assert diagnostics_cli.main() == 1
    assert "config-invalid" in capsys.readouterr().out


def test_diag_provider_checks_skip_network(monkeypatch, capsys):
    cfg = _cfg(local={"base_url": "http://ollama.test"}, cloud_primary={"api_key": "AIzaX"})
    monkeypatch.setattr(diagnostics_cli, "load_app_config", lambda instance_path=None: cfg)
    monkeypatch.setattr("sys.argv", ["ideaforge-diag", "--check-providers", "--skip-provider-tests"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "provider-checks:" in out
    assert "- local: enabled=True ok=False error=skipped" in out
    assert "- cloud_secondary: enabled=True ok=False error=missing api key in env" in out


def test_diag_routing_output(monkeypatch, capsys):
    cfg = _cfg(local={"base_url": "http://ollama.test"})
    monkeypatch.setattr(diagnostics_cli, "load_app_config", lambda instance_path=None: cfg)
    monkeypatch.setattr("sys.argv", ["ideaforge-diag", "--routing"])
    rc = diagnostics_cli.main()
    out = capsys.readouterr().out
    assert rc == 0
    assert "- inspire: local" in out
    assert "- synthesize: local" in out


def test_diag_without_flags_prints_help(monkeypatch, capsys):
    monkeypatch.setattr(diagnostics_cli, "load_app_config", lambda instance_path=None: _cfg())
    monkeypatch.setattr("sys.argv", ["ideaforge-diag"])
    assert diagnostics_cli.main() == 0
    assert "--check-providers" in capsys.readouterr().out
