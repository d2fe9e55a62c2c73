"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from pathlib import Path
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import LOG_ROOT, write_cli_log, write_forward_log

console = Console()


class ForwardInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, target: str, timestamp: datetime):
        self.method = method
        self.target = target
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded and passed-through traffic."""

    def __init__(self, config: Config, log_root: Path = LOG_ROOT):
        self.config = config
        self._log_root = log_root
        self._lock = Lock()
        self._forwards: list[ForwardInfo] = []
        self._max_forwards = 8
        self._request_count = {"forwarded": 0, "passthrough": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(
        self,
        method: str,
        target: str,
        headers: dict[str, str],
        *,
        name: str,
    ) -> None:
        """Log a request about to be sent upstream."""
        with self._lock:
            self._request_count["forwarded"] += 1
            self._forwards.insert(0, ForwardInfo(method, target, datetime.now()))
            self._forwards = self._forwards[: self._max_forwards]

            write_forward_log(method, target, headers, name=name, log_root=self._log_root)
            write_cli_log(
                "FORWARD", target, log_file=self._cli_log_file, method=method, name=name
            )

            self._refresh()

    def log_passthrough(self, method: str, path: str) -> None:
        """Log a request handed to the downstream app."""
        with self._lock:
            self._request_count["passthrough"] += 1
            self._refresh()

    def log_relay(self, target: str, status: int) -> None:
        """Record the upstream status on the most recent matching forward."""
        with self._lock:
            for info in self._forwards:
                if info.status is None and info.target == target:
                    info.status = status
                    break
            self._refresh()

    def log_error(self, target: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{status} {target}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log(
                "ERROR", message[:200], log_file=self._cli_log_file, target=target, status=status
            )

    @property
    def _cli_log_file(self) -> Path:
        return self._log_root / "proxy.log"

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_forwards_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append(self.config.forward.name, style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._request_count['forwarded']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Passed through: {self._request_count['passthrough']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._request_count['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_forwards_panel(self) -> Panel:
        """Build recent forwards panel."""
        if self._forwards:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=8)
            table.add_column("Target", ratio=3)
            table.add_column("Status", width=6)

            for info in self._forwards:
                status = str(info.status) if info.status is not None else "..."
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    info.target[:60] + "..." if len(info.target) > 60 else info.target,
                    status,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Forwarded[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Send requests to http://{self.config.proxy.host}:{self.config.proxy.port} "
                f"with a {self.config.forward.trigger_header} header to forward them",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
