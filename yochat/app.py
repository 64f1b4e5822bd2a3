"""The ask operation, from question to clipboard."""

from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from yochat.backend import GeminiBackend
from yochat.clipboard import copy_to_clipboard
from yochat.commands import copy_commands, extract_commands
from yochat.config import ChatSettings, load_config, resolve_api_key
from yochat.console import console as default_console
from yochat.console import rich_escape
from yochat.request import build_contents, build_parts, read_attachment
from yochat.stream import AskState, AskStateMachine, stream_answer


def prepare_parts(question: str, file_path: str | Path | None, settings: ChatSettings, out=None) -> list:
    out = out or default_console
    attachment = None
    if file_path:
        label = rich_escape(str(file_path))
        with out.status(f"Analyzing file: {label}", spinner="dots") as status:
            attachment = read_attachment(file_path)
            status.update(f"Analyzing file: {label} (MIME type: {attachment.mime_type})")
        blob = attachment.mime_type in settings.blob_mime_types
        logger.debug("attachment {} sent as {}", attachment.name, "blob" if blob else "text")
    return build_parts(question, attachment, settings.blob_mime_types)


async def ask(parts: list, backend, settings: ChatSettings, *, out=None, clipboard=copy_to_clipboard,
              machine: AskStateMachine | None = None) -> AskState:
    """Stream the answer to the terminal, then copy its commands if it completed."""
    from rich.text import Text

    out = out or default_console
    machine = machine or AskStateMachine()
    status = out.status(Text.from_markup("[muted]thinking...[/muted]"), spinner="dots")
    status.start()
    result = await stream_answer(
        backend.stream(build_contents(parts)),
        status=status,
        out=out,
        markers=settings.markers,
        deadline=settings.deadline,
        machine=machine,
    )
    if not result.complete:
        return result.state

    machine.advance(AskState.EXTRACTING)
    commands = extract_commands(result.answer, settings.markers)
    logger.debug("extracted {} command(s)", len(commands))
    if settings.copy_commands:
        copy_commands(commands, clipboard, out)
    machine.advance(AskState.DONE)
    return machine.state


def run_ask(question: str, file_path: str | Path | None, settings: ChatSettings, *, out=None,
            environ=None, backend_factory=GeminiBackend, clipboard=copy_to_clipboard) -> int:
    """Exit code for one ask: 0 when the answer completed, 1 otherwise.

    Config, key and attachment problems raise YochatError for the CLI to report.
    """
    out = out or default_console
    parts = prepare_parts(question, file_path, settings, out)
    api_key = resolve_api_key(load_config(), environ)
    backend = backend_factory(api_key, settings)
    state = asyncio.run(ask(parts, backend, settings, out=out, clipboard=clipboard))
    return 0 if state is AskState.DONE else 1
