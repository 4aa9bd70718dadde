"""Terminal front end for the calculator engine.

The :func:`main` function runs a small REPL. Each line is split on
whitespace; every word is one of:

* a command starting with ``:`` (``:quit``, ``:history``, ``:use N``,
  ``:clear-history``, ``:theme``, ``:help``)
* an action name such as ``equals`` or ``square-root``
* a named key (``Enter``, ``Escape``, ``Backspace``, ``Delete``)
* a run of single-character keys, e.g. ``12+3=`` or ``9r``

The REPL runs on an asyncio event loop, which also drives the timer
that clears error messages after two seconds.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import queue
import sys
import threading

from dotenv import load_dotenv

from pocketcalc.core import Action, Calculator, Display
from pocketcalc.formatting import format_result, sanitize_output
from pocketcalc.keyboard import ACTION, DIGIT, OPERATOR, key_to_token
from pocketcalc.settings import Settings, SettingsStore

logger = logging.getLogger(__name__)

NAMED_KEYS = ("Enter", "Escape", "Backspace", "Delete")

HELP_TEXT = """\
digits 0-9, operators + - * /, = or Enter for equals, . for a decimal point
r square root, s square, x cube, i reciprocal, % percentage
M store memory, m recall memory, c clear, Delete clear entry
actions by name: memory-add, memory-subtract, memory-clear, ...
commands: :history  :use N  :clear-history  :theme  :help  :quit"""


def render(snapshot: Display, memory_active: bool = False) -> str:
    """One output line: memory flag, pending operation and display."""
    marker = "M" if memory_active else " "
    line = sanitize_output(snapshot.operation_line).rjust(16)
    text = sanitize_output(snapshot.display)
    if snapshot.errored:
        text = f"! {text}"
    return f"{marker} {line} | {text}"


def apply_word(calc: Calculator, word: str) -> Display:
    """Feed one non-command word to the engine."""
    if word in {action.value for action in Action}:
        return calc.submit_action(word)
    if word in NAMED_KEYS:
        keys = [word]
    else:
        keys = list(word)

    snapshot = calc.snapshot()
    for key in keys:
        token = key_to_token(key)
        if token is None:
            logger.warning("Ignoring unbound key %r", key)
            continue
        kind, value = token
        if kind == DIGIT:
            snapshot = calc.submit_digit(value)
        elif kind == OPERATOR:
            snapshot = calc.submit_operator(value)
        elif kind == ACTION:
            snapshot = calc.submit_action(value)
    return snapshot


class Session:
    """REPL state around one calculator."""

    def __init__(
        self,
        calc: Calculator,
        settings: Settings,
        store: SettingsStore | None = None,
        out=None,
    ) -> None:
        self.calc = calc
        self.settings = settings
        self.store = store
        self.out = out or sys.stdout
        self.running = True

    def echo(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def show(self, snapshot: Display) -> None:
        self.echo(render(snapshot, self.calc.state.memory_active))

    def run_command(self, word: str, argument: str | None) -> None:
        command = word[1:].lower()
        if command in ("q", "quit", "exit"):
            self.running = False
        elif command == "help":
            self.echo(HELP_TEXT)
        elif command == "history":
            history = self.calc.history
            if not history:
                self.echo("No calculations yet")
            for index, entry in enumerate(history):
                self.echo(f"{index}: {sanitize_output(entry.expression)} = {self.calc_format(entry.result)}")
        elif command == "clear-history":
            self.calc.clear_history()
            self.echo("History cleared")
        elif command == "use":
            try:
                self.calc.use_history_item(int(argument or ""))
            except (ValueError, IndexError):
                self.echo("Usage: :use N where N is a history index")
                return
            self.show(self.calc.snapshot())
        elif command == "theme":
            self.settings = self.settings.with_next_theme()
            if self.store is not None:
                self.store.save(self.settings)
            self.echo(f"Theme: {self.settings.theme}")
        else:
            self.echo(f"Unknown command {word}; try :help")

    def calc_format(self, value: float) -> str:
        return format_result(value, self.calc.state.max_digits)

    def handle_line(self, line: str) -> None:
        words = line.split()
        if not words:
            return

        if words[0].startswith(":"):
            self.run_command(words[0], words[1] if len(words) > 1 else None)
            return

        snapshot = self.calc.snapshot()
        for word in words:
            snapshot = apply_word(self.calc, word)
        self.show(snapshot)
        if snapshot.result is not None:
            logger.debug("Result %s", snapshot.result)


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


class LineReader:
    """
    Prompted stdin reads on a daemon thread.

    A read still blocked in ``input()`` must not keep the process alive
    once the event loop shuts down, so lines are handed back to the loop
    through an :class:`asyncio.Queue` instead of the default executor.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._prompts: queue.Queue[str | None] = queue.Queue()
        self._lines: asyncio.Queue[str | None] = asyncio.Queue()
        self._thread = threading.Thread(target=self._run, name="pocketcalc-stdin", daemon=True)
        self._thread.start()

    async def readline(self, prompt: str) -> str | None:
        """Prompt for one line; None at end of input."""
        self._prompts.put(prompt)
        return await self._lines.get()

    def close(self) -> None:
        self._prompts.put(None)

    def _run(self) -> None:
        while True:
            prompt = self._prompts.get()
            if prompt is None:
                return
            line = _read_line(prompt)
            try:
                self._loop.call_soon_threadsafe(self._lines.put_nowait, line)
            except RuntimeError:
                logger.debug("Event loop closed before a read finished")
                return
            if line is None:
                return


async def run_session(settings: Settings, store: SettingsStore | None = None, out=None) -> None:
    loop = asyncio.get_running_loop()
    session: Session | None = None

    def on_timer(snapshot: Display) -> None:
        if session is not None:
            session.show(snapshot)

    calc = Calculator(
        precision=settings.precision,
        history_limit=settings.history_limit,
        scheduler=loop,
        listener=on_timer,
    )
    session = Session(calc, settings, store, out)
    session.show(calc.snapshot())

    reader = LineReader(loop)
    try:
        while session.running:
            line = await reader.readline("> ")
            if line is None:
                break
            session.handle_line(line)
    finally:
        reader.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pocketcalc", description="Keypad calculator REPL")
    parser.add_argument("--precision", type=int, choices=(8, 10, 12, 15))
    parser.add_argument("--history-limit", type=int, choices=(25, 50, 100))
    parser.add_argument("--settings", metavar="PATH", help="JSON file holding saved preferences")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
    )
    return parser


def load_settings(args: argparse.Namespace, store: SettingsStore | None) -> Settings:
    """Defaults, then the settings file, then the environment, then flags."""
    settings = store.load() if store is not None else Settings()
    settings = Settings.from_env(base=settings)
    overrides = {}
    if args.precision is not None:
        overrides["precision"] = args.precision
    if args.history_limit is not None:
        overrides["history_limit"] = args.history_limit
    return Settings.from_mapping(overrides, base=settings)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = SettingsStore(args.settings) if args.settings else None
    settings = load_settings(args, store)
    logger.info("Starting with %s", settings)

    try:
        asyncio.run(run_session(settings, store))
    except KeyboardInterrupt:
        print()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
