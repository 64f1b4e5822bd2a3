import pytest

from yochat.errors import AttachmentError
from yochat.request import (
    DEFAULT_BLOB_MIME_TYPES,
    attachment_part,
    build_contents,
    build_parts,
    guess_mime_type,
    read_attachment,
)


def test_guess_mime_type_defaults_to_plain_text() -> None:
    assert guess_mime_type("photo.png") == "image/png"
    assert guess_mime_type("report.pdf") == "application/pdf"
    assert guess_mime_type("Makefile") == "text/plain"


def test_allowed_media_is_sent_as_bytes(tmp_path) -> None:
    image = tmp_path / "shot.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n")

    part = attachment_part(read_attachment(image))

    assert part.inline_data is not None
    assert part.inline_data.mime_type == "image/png"
    assert part.inline_data.data == b"\x89PNG\r\n\x1a\n"


def test_other_files_are_inlined_as_text(tmp_path) -> None:
    log = tmp_path / "build.log"
    log.write_text("error: linker failed", encoding="utf-8")

    part = attachment_part(read_attachment(log))

    assert part.inline_data is None
    assert part.text == "file - [build.log], [error: linker failed]"


def test_undecodable_text_is_replaced_not_fatal(tmp_path) -> None:
    data = tmp_path / "data.txt"
    data.write_bytes(b"ok \xff\xfe")

    part = attachment_part(read_attachment(data))

    assert part.text.startswith("file - [data.txt], [ok ")


def test_allow_list_is_passed_in(tmp_path) -> None:
    image = tmp_path / "shot.png"
    image.write_bytes(b"png")

    part = attachment_part(read_attachment(image), blob_mime_types=frozenset())

    assert part.inline_data is None
    assert part.text == "file - [shot.png], [png]"
    assert "image/png" in DEFAULT_BLOB_MIME_TYPES


def test_file_part_comes_before_question(tmp_path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("hello", encoding="utf-8")

    parts = build_parts("summarize", read_attachment(notes))

    assert [p.text for p in parts] == ["file - [notes.md], [hello]", "summarize"]


def test_no_question_no_file_means_no_parts() -> None:
    assert build_parts("") == []


def test_contents_wrap_parts_as_user_turn() -> None:
    contents = build_contents(build_parts("what is my ip"))
    assert len(contents) == 1
    assert contents[0].role == "user"
    assert contents[0].parts[0].text == "what is my ip"


def test_missing_attachment_raises(tmp_path) -> None:
    with pytest.raises(AttachmentError, match="Error reading file"):
        read_attachment(tmp_path / "missing.txt")
