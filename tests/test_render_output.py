from maxq.parsers.render_output import (
    FAILURE, PLACEHOLDER, PROGRESS, STDERR, STDOUT, SUCCESS, OutputDecoder, classify,
)


def test_error_on_stderr_is_failure():
    event = classify("ERROR: missing plugin", STDERR)
    assert event.kind == FAILURE
    assert event.text == "ERROR: missing plugin"
    assert event.is_terminal


def test_error_word_on_stdout_is_only_progress():
    assert classify("0 errors, 2 warnings", STDOUT).kind == PROGRESS


def test_completion_markers_on_either_channel():
    assert classify("Frame 1/1\nRendering completed.\n", STDOUT).kind == SUCCESS
    assert classify("Job successfully rendered", STDERR).kind == SUCCESS


def test_stderr_failure_wins_over_completion():
    assert classify("Error after Rendering completed", STDERR).kind == FAILURE


def test_plain_lines_are_progress_verbatim():
    event = classify("Rendering frame 3 of 10 ...", STDOUT)
    assert event == (PROGRESS, "Rendering frame 3 of 10 ...")
    assert not event.is_terminal


def test_sanitize_replaces_bad_bytes_and_controls():
    text = OutputDecoder().feed(b"ok \xff\xfe done\x07\r\n\tnext", final=True)
    assert text.startswith("ok ")
    assert "\x07" not in text
    assert text.endswith("\r\n\tnext")
    assert text.count(PLACEHOLDER) >= 2


def test_sanitize_keeps_unicode_text():
    text = "Szene geöffnet – 100%"
    assert OutputDecoder().feed(text.encode("utf-8"), final=True) == text


def test_character_split_across_reads_is_kept_whole():
    data = "Szene geöffnet\n".encode("utf-8")
    cut = data.index(b"\xc3") + 1
    decoder = OutputDecoder()

    assert decoder.feed(data[:cut]) == "Szene ge"
    assert decoder.feed(data[cut:]) == "öffnet\n"


def test_truncated_character_at_end_of_stream_becomes_placeholder():
    decoder = OutputDecoder()
    assert decoder.feed(b"done \xc3") == "done "
    assert decoder.feed(b"", final=True) == PLACEHOLDER
