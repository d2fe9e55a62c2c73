from rich.console import Console

from core.config import Config
from ui.dashboard import Dashboard


def render(renderable) -> str:
    console = Console(width=120, record=True)
    console.print(renderable)
    return console.export_text()


def test_counts_and_recent_forwards(tmp_path):
    dashboard = Dashboard(Config(), log_root=tmp_path)

    dashboard.log_passthrough("GET", "/health")
    dashboard.log_forward("GET", "https://example.org/a", {}, name="proxy-forward")
    dashboard.log_relay("https://example.org/a", 204)

    text = render(dashboard._build_layout())
    assert "Forwarded: 1" in text
    assert "Passed through: 1" in text
    assert "https://example.org/a" in text
    assert "204" in text
    assert len(list((tmp_path / "forward").glob("*.json"))) == 1


def test_recent_forwards_are_capped(tmp_path):
    dashboard = Dashboard(Config(), log_root=tmp_path)

    for i in range(12):
        dashboard.log_forward("GET", f"https://example.org/{i}", {}, name="proxy-forward")

    assert len(dashboard._forwards) == 8
    assert dashboard._forwards[0].target == "https://example.org/11"


def test_errors_shown_and_logged(tmp_path):
    dashboard = Dashboard(Config(), log_root=tmp_path)

    dashboard.log_error("https://example.org/", 502, "Upstream connection error: refused")

    text = render(dashboard._build_footer())
    assert "502 https://example.org/" in text
    assert "Errors: 1" in render(dashboard._build_header())
    log_line = (tmp_path / "proxy.log").read_text()
    assert "ERROR: Upstream connection error: refused" in log_line
    assert "status=502" in log_line


def test_idle_footer_mentions_trigger_header(tmp_path):
    dashboard = Dashboard(Config(), log_root=tmp_path)

    text = render(dashboard._build_footer())

    assert "Location" in text
