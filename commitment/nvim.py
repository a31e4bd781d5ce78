"""Neovim remote plugin: EditorHost over pynvim.

Load from Lua with:

    vim.fn.CommitmentSetup({ writes_number = 10, prevent_write = true })
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable

import pynvim

from .config import ConfigError
from .host import Buffer, EditorHost, Level
from .logger import get_logger
from .plugin import Commitment
from .plugin import setup as setup_commitment

logger = get_logger("nvim")

AUGROUP = "commitment"
RPC_EVENT = "commitment_event"

_REGISTER_AUTOCMD = """
local group, event, chan, method = ...
vim.api.nvim_create_autocmd(event, {
  group = vim.api.nvim_create_augroup(group, { clear = false }),
  pattern = "*",
  callback = function(args)
    local file = args.file ~= "" and vim.fn.fnamemodify(args.file, ":p") or nil
    vim.rpcrequest(chan, method, event, file)
  end,
})
"""

_NOTIFY = """
local message, level = ...
vim.notify(message, vim.log.levels[level])
"""


class _DeferredCall:
    """threading.Timer that hands its callback back to the editor loop."""

    def __init__(self, nvim: pynvim.Nvim, ms: int, callback: Callable[[], None]):
        self._timer = threading.Timer(ms / 1000, nvim.async_call, args=(callback,))
        self._timer.daemon = True
        self._timer.start()

    def cancel(self) -> None:
        self._timer.cancel()


class NvimHost(EditorHost):
    """EditorHost backed by a live Neovim session."""

    def __init__(self, nvim: pynvim.Nvim):
        self._nvim = nvim
        self._callbacks: dict[str, list[Callable[[], None]]] = {}
        self._afile: str | None = None

    def cwd(self) -> Path:
        return Path(self._nvim.funcs.getcwd())

    def on(self, event: str, callback: Callable[[], None]) -> None:
        if event not in self._callbacks:
            self._nvim.exec_lua(
                _REGISTER_AUTOCMD, AUGROUP, event, self._nvim.channel_id, RPC_EVENT
            )
        self._callbacks.setdefault(event, []).append(callback)

    def clear_hooks(self) -> None:
        self._nvim.api.create_augroup(AUGROUP, {"clear": True})
        self._callbacks.clear()

    def dispatch(self, event: str, file: str | None = None) -> None:
        """Run the callbacks registered for event (called over rpc).

        file is the autocmd's <afile>, readable through write_target()
        while the callbacks run.
        """
        self._afile = file
        try:
            for callback in list(self._callbacks.get(event, ())):
                callback()
        finally:
            self._afile = None

    def fire(self, event: str, bufnr: int | None = None) -> None:
        opts = {"buffer": bufnr} if bufnr is not None else {}
        self._nvim.api.exec_autocmds(event, opts)

    def current_buffer(self) -> Buffer:
        buf = self._nvim.current.buffer
        return Buffer(
            number=buf.number,
            name=buf.name,
            lines=list(buf[:]),
            modified=bool(buf.options["modified"]),
        )

    def set_modified(self, bufnr: int, modified: bool) -> None:
        self._nvim.buffers[bufnr].options["modified"] = modified

    def is_forced_write(self) -> bool:
        return self._nvim.vvars["cmdbang"] == 1

    def write_target(self) -> str | None:
        return self._afile

    def defer(self, ms: int, callback: Callable[[], None]) -> _DeferredCall:
        return _DeferredCall(self._nvim, ms, callback)

    def now_ms(self) -> float:
        return time.monotonic() * 1000

    def notify(self, message: str, level: Level) -> None:
        self._nvim.exec_lua(_NOTIFY, message, level.name)


@pynvim.plugin
class CommitmentPlugin:
    """Entry point discovered by :UpdateRemotePlugins."""

    def __init__(self, nvim: pynvim.Nvim):
        self.nvim = nvim
        self.host = NvimHost(nvim)
        self.instance: Commitment | None = None

    @pynvim.function("CommitmentSetup", sync=True)
    def setup(self, args):
        overrides = args[0] if args else None
        self.teardown()
        try:
            self.instance = setup_commitment(self.host, overrides)
        except ConfigError as e:
            logger.error("Invalid config: %s", e)
            self.host.notify(f"commitment: {e}", Level.ERROR)
            self.instance = None
        return self.instance is not None

    @pynvim.function("CommitmentStatus", sync=True)
    def status(self, args):
        return self.instance.status() if self.instance else {}

    @pynvim.rpc_export(RPC_EVENT, sync=True)
    def on_event(self, event, file=None):
        self.host.dispatch(event, file)

    @pynvim.autocmd("VimLeavePre", sync=True)
    def on_leave(self):
        self.teardown()

    def teardown(self):
        if self.instance is not None:
            self.instance.teardown()
            self.instance = None
