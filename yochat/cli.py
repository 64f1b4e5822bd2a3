"""Command line entry point: `chat`."""

from __future__ import annotations

import argparse

from loguru import logger

from yochat import __version__
from yochat.app import run_ask
from yochat.config import AISTUDIO_URL, DEFAULT_MODEL, ChatSettings, load_config, save_config
from yochat.console import bootstrap_output_encoding, get_console, rich_escape
from yochat.errors import YochatError
from yochat.logging_utils import configure_logging

USAGE_LINES = (
    "Usage:",
    "  chat [options] <your_question>",
    '  chat --file <path_to_file> "Your question about the file"',
)

OPTIONS = (
    ("--file <path>", "Provides a file (text, image, etc.) for analysis. Required for multimodal input."),
    ("-q <question>", "Optional way to ask the question (alternative to just typing it)."),
    ("--model <id>", f"Gemini model to ask (default {DEFAULT_MODEL})."),
    ("--no-copy", "Do not copy extracted commands to the clipboard."),
)

COMMANDS = (
    ("<your_question>", 'Asks the model a question. Example: chat "What is what?"'),
    ("--file", 'Uploads a file for analysis. Example: chat --file ./image.jpg "What is in this picture?"'),
    ("help", "Shows this help message."),
    ("set <api-key>", f"Set your Gemini API key. Obtain one from {AISTUDIO_URL} (free)"),
    ("version", "Show the yochat version."),
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="chat",
        description="Ask Gemini a question from the terminal.",
        add_help=False,
    )
    parser.add_argument("--file", help="Path to a file (text, image, etc.) to analyze.")
    parser.add_argument("-q", dest="question", help="Direct question to ask.")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Model ID to use.")
    parser.add_argument("--no-copy", action="store_true", help="Do not copy commands to the clipboard.")
    parser.add_argument("--version", action="store_true", help="Show version and exit.")
    parser.add_argument("-h", "--help", action="store_true", help="Show help and exit.")
    # Options end at the first plain word so questions can carry flags like "ls -la".
    parser.add_argument("words", nargs=argparse.REMAINDER, help="Question words, or help / set / version.")
    return parser.parse_args(argv)


def print_help(out=None) -> None:
    from rich.table import Table

    out = out or get_console()
    for line in USAGE_LINES:
        out.print(line, markup=False, highlight=False)
    for title, rows in (("Options", OPTIONS), ("Available Commands", COMMANDS)):
        out.print()
        table = Table(title=title, title_justify="left", show_header=False, box=None, padding=(0, 2))
        table.add_column("Cmd", style="accent", no_wrap=True)
        table.add_column("Description")
        for name, desc in rows:
            table.add_row(rich_escape(name), rich_escape(desc))
        out.print(table)


def handle_set(args: list[str], out=None) -> int:
    out = out or get_console()
    if not args:
        out.print("Usage:", markup=False)
        out.print(f"  set <your-api-key> - obtain one from {AISTUDIO_URL} (free)", markup=False)
        return 0
    cfg = load_config()
    cfg.api_key = args[0]
    path = save_config(cfg)
    out.print("[ok]API key set successfully.[/ok]")
    out.print(f"Config file location: {rich_escape(str(path))}")
    return 0


def resolve_question(args) -> str:
    """-q wins over positional words, with or without --file."""
    if args.question:
        return args.question
    return " ".join(args.words)


def main(argv=None) -> int:
    bootstrap_output_encoding()
    configure_logging()
    out = get_console()
    args = parse_args(argv)

    if args.version:
        out.print(f"v{__version__}", highlight=False)
        return 0
    if args.help:
        print_help(out)
        return 0

    try:
        if args.words and not args.file and not args.question:
            command, rest = args.words[0], args.words[1:]
            if command == "help":
                print_help(out)
                return 0
            if command == "set":
                return handle_set(rest, out)
            if command == "version":
                out.print(f"v{__version__}", highlight=False)
                return 0

        question = resolve_question(args)
        if not question and not args.file:
            out.print("Please provide a question to ask, a file using --file, or use the -q flag.")
            print_help(out)
            return 1

        settings = ChatSettings(model=args.model, copy_commands=not args.no_copy)
        logger.debug("asking {} (file={})", settings.model, args.file)
        return run_ask(question, args.file, settings, out=out)
    except YochatError as e:
        out.print(f"[err]{rich_escape(str(e))}[/err]")
        return 1
    except KeyboardInterrupt:
        out.print("\n[muted]Interrupted.[/muted]")
        return 130
