"""Plugin wiring: setup() builds the gate and installs the hooks."""

from __future__ import annotations

from pathlib import Path

from .config import CommitmentConfig, load_config
from .gate import WriteGate
from .git import GitInspector
from .host import BUF_WRITE_CMD, EditorHost
from .logger import get_logger, log_setup
from .notifier import DebouncedNotifier, HostSink, NotificationSink
from .scheduler import EventTrigger, IntervalTrigger, build_scheduler
from .writer import SaveInterceptor

logger = get_logger("plugin")


class Commitment:
    """A running plugin instance for one editor session."""

    def __init__(
        self,
        host: EditorHost,
        config: CommitmentConfig,
        gate: WriteGate,
        scheduler: EventTrigger | IntervalTrigger,
        interceptor: SaveInterceptor | None = None,
    ) -> None:
        self.host = host
        self.config = config
        self.gate = gate
        self.scheduler = scheduler
        self.interceptor = interceptor
        self.active = False

    def start(self) -> None:
        if self.interceptor is not None:
            self.host.on(BUF_WRITE_CMD, self._on_write_cmd)
        self.scheduler.start()
        self.active = True

    def teardown(self) -> None:
        """Stop the timer and remove every hook."""
        if not self.active:
            return
        self.scheduler.stop()
        self.host.clear_hooks()
        self.active = False
        logger.info("commitment stopped")

    def status(self) -> dict:
        state = self.gate.state
        return {
            "writes_count": state.writes_count,
            "locked": state.locked,
            "reason": state.reason.value if state.reason else None,
            "mode": self.scheduler.mode,
            "blocks_writes": self.gate.blocks_writes(),
        }

    def _on_write_cmd(self) -> None:
        self.interceptor.handle_save(
            force=self.host.is_forced_write(), target=self.host.write_target()
        )


def setup(
    host: EditorHost,
    overrides: dict | None = None,
    *,
    config_path: Path | str | None = None,
    inspector: GitInspector | None = None,
    sink: NotificationSink | None = None,
) -> Commitment | None:
    """Set commitment up for the host's working directory.

    Returns None, with nothing installed, outside a git repository.
    Raises ConfigError for invalid options.
    """
    cwd = host.cwd()
    inspector = inspector or GitInspector(cwd)
    if not inspector.is_repository():
        log_setup(False, detail="not a git repository")
        return None

    config = load_config(overrides, config_path=config_path, cwd=cwd)
    notifier = DebouncedNotifier(sink or HostSink(host), clock=host.now_ms)
    gate = WriteGate(config, inspector, notifier)

    interceptor = None
    if config.prevent_write or config.stop_on_useless_commit:
        interceptor = SaveInterceptor(host, gate)

    plugin = Commitment(
        host, config, gate, build_scheduler(host, gate, config), interceptor
    )
    plugin.start()
    log_setup(True, mode=plugin.scheduler.mode)
    return plugin
