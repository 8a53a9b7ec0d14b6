"""Tail a JSONL replay log and render the latest tick (Textual)."""

from __future__ import annotations

import threading
import time
from pathlib import Path

from rich.panel import Panel
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Static

from timberyard.render.replay_reader import parse_tick_line
from timberyard.render.viewer import render_tick
from timberyard.sim.contracts import TickPayload


class TailViewerScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #tail-view {
        height: 1fr;
    }
    """

    def __init__(
        self, path: Path, *, poll_interval: float = 0.2, from_start: bool = False
    ) -> None:
        super().__init__()
        self._path = path
        self._poll_interval = poll_interval
        self._from_start = from_start
        self._view: Static | None = None
        self._stop_event = threading.Event()

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            yield Static(id="tail-view")

    def on_mount(self) -> None:
        self._view = self.query_one("#tail-view", Static)
        self._view.update(
            Panel(Text(f"Waiting for ticks in {self._path}..."), title="Live Replay")
        )
        thread = threading.Thread(target=self._tail_loop, daemon=True)
        thread.start()

    def on_unmount(self) -> None:
        self._stop_event.set()

    def _tail_loop(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch(exist_ok=True)
        with self._path.open("r", encoding="utf-8") as handle:
            if not self._from_start:
                handle.seek(0, 2)
            while not self._stop_event.is_set():
                line = handle.readline()
                if not line:
                    time.sleep(self._poll_interval)
                    continue
                payload = parse_tick_line(line)
                if payload is not None:
                    self.app.call_from_thread(self._update_payload, payload)

    def _update_payload(self, payload: TickPayload) -> None:
        if self._view:
            self._view.update(render_tick(payload))


class TailApp(App):
    BINDINGS = [("q", "quit", "Quit")]

    def __init__(self, path: Path, *, poll_interval: float, from_start: bool) -> None:
        super().__init__()
        self._tail_screen = TailViewerScreen(
            path, poll_interval=poll_interval, from_start=from_start
        )
        self.title = f"Timberyard Tail: {path.parent.name}"

    def on_mount(self) -> None:
        self.push_screen(self._tail_screen)


def tail_replay_log(
    path: Path, *, poll_interval: float = 0.2, from_start: bool = False
) -> None:
    TailApp(path, poll_interval=poll_interval, from_start=from_start).run()
