import pytest

from utils.scan_buffer import ScanBuffer


@pytest.fixture
def scans():
    return []


@pytest.fixture
def buffer(scheduler, scans):
    return ScanBuffer(scans.append, scheduler, quiet_period_ms=200)


def type_keys(buffer, text, target=None):
    for ch in text:
        buffer.feed(ch, target)


def test_enter_flushes_full_tag_once(buffer, scheduler, scans):
    type_keys(buffer, "A1B2C3")
    buffer.feed("Enter")

    assert scans == ["A1B2C3"]
    assert buffer.pending == ""
    assert scheduler.pending == 0

    scheduler.advance(1000)
    assert scans == ["A1B2C3"]


def test_quiet_period_flushes_without_enter(buffer, scheduler, scans):
    type_keys(buffer, "0012345")

    scheduler.advance(199)
    assert scans == []

    scheduler.advance(1)
    assert scans == ["0012345"]

    scheduler.advance(1000)
    assert scans == ["0012345"]


def test_late_characters_do_not_extend_quiet_period(buffer, scheduler, scans):
    buffer.feed("A")
    scheduler.advance(150)
    buffer.feed("B")
    scheduler.advance(50)

    assert scans == ["AB"]


def test_form_field_keys_are_ignored(buffer, scheduler, scans):
    assert buffer.feed("x", target="INPUT") is False
    assert buffer.feed("y", target="textarea") is False
    assert buffer.feed("Enter", target="INPUT") is False

    scheduler.advance(500)
    assert scans == []
    assert scheduler.pending == 0


def test_enter_on_empty_buffer_is_noop(buffer, scans):
    buffer.feed("Enter")
    assert scans == []


def test_named_keys_are_not_buffered(buffer, scans):
    buffer.feed("Shift")
    type_keys(buffer, "ab")
    buffer.feed("Tab")
    buffer.feed("Enter")

    assert scans == ["ab"]


def test_consecutive_scans_flush_separately(buffer, scheduler, scans):
    type_keys(buffer, "111")
    buffer.feed("Enter")
    type_keys(buffer, "222")
    scheduler.advance(200)

    assert scans == ["111", "222"]


def test_reset_discards_buffer(buffer, scheduler, scans):
    type_keys(buffer, "999")
    buffer.reset()
    scheduler.advance(500)

    assert scans == []
    assert buffer.pending == ""
