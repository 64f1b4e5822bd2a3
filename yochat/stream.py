"""
Streaming side of an ask: accumulate fragments, keep the status line live,
and settle on one final answer.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
from dataclasses import dataclass
from typing import AsyncIterable

from loguru import logger

from yochat.commands import DEFAULT_MARKERS, Markers
from yochat.config import REQUEST_DEADLINE_SECONDS
from yochat.console import console as default_console
from yochat.console import rich_escape
from yochat.errors import RequestTimeoutError


class AskState(enum.Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETE = "complete"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    EXTRACTING = "extracting"
    DONE = "done"


_TRANSITIONS = {
    AskState.IDLE: {AskState.STREAMING},
    AskState.STREAMING: {AskState.COMPLETE, AskState.TIMED_OUT, AskState.ERRORED},
    AskState.COMPLETE: {AskState.EXTRACTING},
    AskState.EXTRACTING: {AskState.DONE},
}


class AskStateMachine:
    def __init__(self):
        self.state = AskState.IDLE
        self.history = [AskState.IDLE]

    def advance(self, new_state: AskState) -> None:
        if new_state not in _TRANSITIONS.get(self.state, ()):
            raise RuntimeError(f"invalid ask transition: {self.state.value} -> {new_state.value}")
        logger.debug("ask state {} -> {}", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)

    @property
    def finished(self) -> bool:
        return not _TRANSITIONS.get(self.state)


@dataclass(frozen=True)
class Fragment:
    """One unit from the backend: a text delta, or an error that ends the stream."""
    text: str = ""
    error: Exception | None = None

    @classmethod
    def delta(cls, text: str) -> Fragment:
        return cls(text=text)

    @classmethod
    def failure(cls, error: Exception) -> Fragment:
        return cls(error=error)


class StreamAccumulator:
    """Append-only answer plus its marker-free display text.

    The display text is recomputed from the whole answer on every fragment,
    so a marker split across two fragments is still removed.
    """

    def __init__(self, markers: Markers = DEFAULT_MARKERS):
        self.markers = markers
        self._answer = ""
        self._display = ""
        self.fragments = 0
        self.closed = False

    @property
    def answer(self) -> str:
        return self._answer

    @property
    def display(self) -> str:
        return self._display

    def feed(self, text: str) -> str:
        if self.closed:
            raise RuntimeError("answer is read-only once the stream has ended")
        self._answer += text
        self._display = self.markers.strip(self._answer)
        self.fragments += 1
        return self._display

    def close(self) -> None:
        self.closed = True


@dataclass(frozen=True)
class StreamResult:
    state: AskState
    answer: str
    display: str
    error: Exception | None = None
    fragments: int = 0

    @property
    def complete(self) -> bool:
        return self.state is AskState.COMPLETE


async def stream_answer(fragments: AsyncIterable[Fragment], *, status=None, out=None,
                        markers: Markers = DEFAULT_MARKERS,
                        deadline: float = REQUEST_DEADLINE_SECONDS,
                        machine: AskStateMachine | None = None) -> StreamResult:
    """Consume fragments until they run out, one carries an error, or the deadline passes.

    The status indicator (anything with update() and stop(), e.g. rich's Status)
    shows the display text as it grows. Whatever happens, the indicator is
    stopped and the display text accumulated so far is printed exactly once.
    """
    from rich.text import Text

    out = out or default_console
    machine = machine or AskStateMachine()
    acc = StreamAccumulator(markers)
    error = None
    final_state = AskState.COMPLETE

    machine.advance(AskState.STREAMING)
    try:
        async with asyncio.timeout(deadline):
            async with _closing(fragments) as source:
                async for fragment in source:
                    if fragment.error is not None:
                        error = fragment.error
                        final_state = AskState.ERRORED
                        out.print(f"[err]{rich_escape(str(error))}[/err]")
                        break
                    display = acc.feed(fragment.text)
                    if status is not None:
                        status.update(Text(display))
    except TimeoutError:
        error = RequestTimeoutError(f"Request timed out after {deadline:g}s")
        final_state = AskState.TIMED_OUT
        out.print(f"[err]{rich_escape(str(error))}[/err]")
    finally:
        acc.close()
        if status is not None:
            status.stop()

    out.print(acc.display, markup=False, highlight=False, emoji=False, soft_wrap=True)
    machine.advance(final_state)
    logger.debug("stream ended: {} after {} fragment(s)", final_state.value, acc.fragments)
    return StreamResult(state=final_state, answer=acc.answer, display=acc.display,
                        error=error, fragments=acc.fragments)


@contextlib.asynccontextmanager
async def _closing(fragments):
    # Async generators are closed explicitly so an early break also ends the request.
    try:
        yield fragments
    finally:
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()
