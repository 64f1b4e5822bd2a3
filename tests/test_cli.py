import json

import pytest

from yochat import __version__, cli

from fakes import output_of


@pytest.fixture
def asks(monkeypatch: pytest.MonkeyPatch, out) -> list:
    calls = []

    def fake_run_ask(question, file_path, settings, *, out=None):
        calls.append({"question": question, "file": file_path, "settings": settings})
        return 0

    monkeypatch.setattr(cli, "get_console", lambda: out)
    monkeypatch.setattr(cli, "run_ask", fake_run_ask)
    return calls


def test_free_form_question_joins_words(asks) -> None:
    assert cli.main(["how", "do", "I", "untar"]) == 0
    assert asks[0]["question"] == "how do I untar"
    assert asks[0]["file"] is None
    assert asks[0]["settings"].copy_commands is True


def test_q_flag_wins_over_words(asks) -> None:
    assert cli.main(["-q", "list ports", "ignored"]) == 0
    assert asks[0]["question"] == "list ports"


def test_file_with_question(asks) -> None:
    assert cli.main(["--file", "notes.txt", "summarize", "this"]) == 0
    assert asks[0] == {"question": "summarize this", "file": "notes.txt", "settings": asks[0]["settings"]}


def test_file_alone_is_enough(asks) -> None:
    assert cli.main(["--file", "photo.png"]) == 0
    assert asks[0]["question"] == ""


def test_model_and_no_copy_flags(asks) -> None:
    cli.main(["--model", "gemini-2.5-pro", "--no-copy", "hi"])
    settings = asks[0]["settings"]
    assert settings.model == "gemini-2.5-pro"
    assert settings.copy_commands is False


def test_no_input_prints_usage_and_fails(asks, out) -> None:
    assert cli.main([]) == 1
    printed = output_of(out)
    assert "Please provide a question" in printed
    assert "chat [options] <your_question>" in printed
    assert asks == []


def test_help_word_prints_usage(asks, out) -> None:
    assert cli.main(["help"]) == 0
    assert "set <api-key>" in output_of(out)
    assert asks == []


@pytest.mark.parametrize("argv", [["version"], ["--version"]])
def test_version(asks, out, argv) -> None:
    assert cli.main(argv) == 0
    assert output_of(out).strip() == f"v{__version__}"


def test_set_persists_key(asks, out, tmp_path) -> None:
    assert cli.main(["set", "AIza-test"]) == 0

    path = tmp_path / "config" / "yochat" / "config.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {"api_key": "AIza-test"}
    printed = output_of(out)
    assert "API key set successfully." in printed
    assert "config.json" in printed
    assert asks == []


def test_set_without_key_prints_usage(asks, out) -> None:
    assert cli.main(["set"]) == 0
    assert "set <your-api-key>" in output_of(out)


def test_errors_are_reported_with_exit_code(monkeypatch, out) -> None:
    from yochat.errors import MissingAPIKeyError

    def failing_run_ask(*args, **kwargs):
        raise MissingAPIKeyError()

    monkeypatch.setattr(cli, "get_console", lambda: out)
    monkeypatch.setattr(cli, "run_ask", failing_run_ask)

    assert cli.main(["hello"]) == 1
    assert "chat set <your-api-key>" in output_of(out)


def test_broken_config_fails_set(asks, out, tmp_path) -> None:
    path = tmp_path / "config" / "yochat" / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text("{oops", encoding="utf-8")

    assert cli.main(["set", "k"]) == 1
    assert "failed to parse config file" in output_of(out)


def test_question_words_may_look_like_flags(asks) -> None:
    assert cli.main(["what", "does", "ls", "-la", "do"]) == 0
    assert asks[0]["question"] == "what does ls -la do"


def test_known_flag_inside_question_is_question_text(asks) -> None:
    assert cli.main(["what", "does", "grep", "-q", "mean"]) == 0
    assert asks[0]["question"] == "what does grep -q mean"
    assert asks[0]["settings"].copy_commands is True


def test_options_before_question_still_apply(asks) -> None:
    assert cli.main(["--no-copy", "explain", "tar", "--help"]) == 0
    assert asks[0]["question"] == "explain tar --help"
    assert asks[0]["settings"].copy_commands is False
