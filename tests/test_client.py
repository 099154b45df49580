"""Tests for the console client: attachment, event routing and drawing."""

import logging
import os
import signal
from unittest.mock import Mock, call, patch

import pytest

from tilevi.actions import Mode
from tilevi.client import ConsoleClient
from tilevi.command import CommandModule
from tilevi.drawing import AskRedraw, CursorStyle, CursorTo, RedrawAll, RedrawLine, RedrawRange
from tilevi.editor import EditorModule
from tilevi.events import Interrupt, Key, ModeChanged, ResizeEvent
from tilevi.keyboard import KeyEvent, KeyType, char, special
from tilevi.layout import Rect
from tilevi.module import Module


class RecordingModule(Module):
    """Module that records what it receives and returns canned answers."""

    name = "recorder"

    def __init__(self, events=None, proxy_events=None, draws=None):
        self.events = events
        self.proxy_events = proxy_events
        self.draws = draws
        self.received = []
        self.proxied = []
        self.container = Rect()
        self.loaded = False
        self.destroyed = False

    def on_load(self):
        self.loaded = True

    def on_event(self, event):
        self.received.append(event)
        return self.events

    def proxy_trigger(self, event, self_index):
        self.proxied.append((event, self_index))
        return self.proxy_events

    def on_draw(self):
        return self.draws

    def on_resize(self, top, right, bottom, left):
        self.container = Rect(top=top, right=right, bottom=bottom, left=left)

    def on_destroy(self):
        self.destroyed = True

    def get_container(self):
        return self.container


def make_terminal(width=80, height=24):
    terminal = Mock()
    terminal.width = width
    terminal.height = height
    return terminal


def make_client(bsp_depth=1, **kwargs):
    client = ConsoleClient(make_terminal(**kwargs), bsp_depth=bsp_depth)
    client.load()
    return client


def editor_client(bsp_depth=1):
    client = make_client(bsp_depth=bsp_depth)
    editor = EditorModule()
    command = CommandModule()
    client.attach_module(editor)
    client.attach_module(command, focus=False)
    return client, editor, command


def test_attach_places_and_loads_modules():
    client = make_client()
    first = RecordingModule()
    second = RecordingModule()

    assert client.attach_module(first) == 0
    assert first.loaded
    assert first.container == Rect(top=0, right=80, bottom=24, left=0)

    assert client.attach_module(second, focus=False) == 1
    assert first.container == Rect(top=0, right=80, bottom=12, left=0)
    assert second.container == Rect(top=12, right=80, bottom=24, left=0)
    assert client.focus_stack == [0]


def test_attach_to_full_layout_is_refused(caplog):
    client = make_client(bsp_depth=0)
    client.attach_module(RecordingModule())

    with caplog.at_level(logging.ERROR, logger="tilevi.client"):
        assert client.attach_module(RecordingModule()) is None

    assert len(client.modules) == 1
    assert "cannot attach" in caplog.text


def test_key_goes_to_focused_module_after_proxy_pass():
    client = make_client()
    first = RecordingModule()
    second = RecordingModule()
    client.attach_module(first)
    client.attach_module(second, focus=False)

    event = Key(char('x'))
    client.update(event)

    assert first.proxied == [(event, 0)]
    assert second.proxied == [(event, 1)]
    assert first.received == [event]
    assert second.received == []


def test_interrupt_skips_focused_dispatch():
    client = make_client()
    module = RecordingModule(proxy_events=[Interrupt()])
    client.attach_module(module)

    client.update(Key(char('x')))

    assert module.received == []


def test_empty_focus_stack_logs_warning(caplog):
    client = make_client()
    client.attach_module(RecordingModule(), focus=False)
    with caplog.at_level(logging.WARNING, logger="tilevi.client"):
        client.update(Key(char('x')))
    assert "no module has focus" in caplog.text


def test_colon_hands_focus_to_command_prompt():
    client, editor, command = editor_client()

    client.update(Key(char(':')))

    assert editor.mode == Mode.COMMAND
    assert command.active
    assert client.focus_stack == [0, 1]
    assert client.proxy_enabled is False


def test_colon_q_enter_quits():
    client, editor, command = editor_client()
    for key in (char(':'), char('q'), special('enter')):
        client.update(Key(key))

    assert client.running is False
    assert command.command_str == ""
    client.terminal.clear_screen.assert_called()


def test_unknown_command_returns_to_editor():
    client, editor, command = editor_client()
    for key in (char(':'), char('x'), special('enter')):
        client.update(Key(key))

    assert client.running
    assert client.focus_stack == [0]
    assert client.proxy_enabled
    assert editor.mode == Mode.NORMAL
    assert command.message == "unknown command: x"

    # Keys reach the editor again
    client.update(Key(char('i')))
    assert editor.mode == Mode.INSERT


def test_escape_in_prompt_cancels_without_quitting():
    client, editor, command = editor_client()
    client.update(Key(char(':')))
    client.update(Key(special('escape')))
    assert client.running
    assert editor.mode == Mode.NORMAL
    assert client.focus_stack == [0]


def test_mode_change_is_broadcast_through_proxy():
    client = make_client()
    editor = EditorModule()
    watcher = RecordingModule()
    client.attach_module(editor)
    client.attach_module(watcher, focus=False)

    client.update(Key(char('i')))

    assert (ModeChanged(Mode.INSERT), 1) in watcher.proxied


def test_open_file_reaches_every_module(tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"text\n")
    client, editor, command = editor_client(bsp_depth=2)
    watcher = RecordingModule()
    client.attach_module(watcher, focus=False)

    client.open_file(str(path))

    assert editor.buffer.line(0) == "text"
    assert len(watcher.received) == 1
    assert watcher.received[0].path == str(path)


def test_resize_event_relayouts_modules():
    client, editor, command = editor_client()
    client.terminal.reset_mock()

    client.update(ResizeEvent(100, 30))

    client.terminal.clear_screen.assert_called_once()
    assert editor.get_container() == Rect(top=0, right=100, bottom=15, left=0)
    assert command.get_container() == Rect(top=15, right=100, bottom=30, left=0)
    assert editor.view.bottom == 14


def test_draw_translates_by_module_rect_and_restores_cursor():
    client, editor, command = editor_client()
    terminal = client.terminal
    terminal.reset_mock()

    client.draw()

    assert terminal.draw_line.call_count == 13
    assert terminal.draw_line.call_args_list[0] == call(0, 0, "   1  ".ljust(80), 80, dim=0)
    assert terminal.draw_line.call_args_list[1] == call(1, 0, "   ~  ".ljust(80), 80, dim=6)
    # The prompt line lives at the top of the lower half
    assert terminal.draw_line.call_args_list[-1] == call(12, 0, "", 80, dim=0)
    assert terminal.move_cursor.call_args_list[-1] == call(0, 6)
    terminal.set_cursor_style.assert_called_with(CursorStyle.STEADY_BLOCK)


def test_draw_cursor_of_command_prompt():
    client, editor, command = editor_client()
    client.update(Key(char(':')))
    client.update(Key(char('w')))
    client.terminal.reset_mock()

    client.draw()

    assert client.terminal.move_cursor.call_args_list[-1] == call(12, 2)
    client.terminal.set_cursor_style.assert_called_with(CursorStyle.BLINKING_BLOCK)


def test_draw_all_blanks_module_rect():
    client = make_client()
    client.attach_module(RecordingModule(draws=[AskRedraw(RedrawAll())]))
    client.terminal.reset_mock()

    client.draw()

    client.terminal.hide_cursor.assert_called_once()
    assert client.terminal.draw_line.call_args_list == [call(y, 0, "", 80) for y in range(24)]


def test_draw_skips_lines_outside_rect_and_logs_range(caplog):
    client = make_client()
    client.attach_module(RecordingModule(draws=[
        AskRedraw(RedrawLine(30, "nope")),
        AskRedraw(RedrawRange(0, 3)),
        CursorTo(1, 2),
    ]))
    client.terminal.reset_mock()

    with caplog.at_level(logging.ERROR, logger="tilevi.client"):
        client.draw()

    client.terminal.draw_line.assert_not_called()
    client.terminal.move_cursor.assert_called_once_with(2, 1)
    assert "not supported" in caplog.text


def test_read_event_decodes_resize_and_keys():
    client = make_client()
    client.terminal.fileno.return_value = 0
    client._resize_pipe_r, client._resize_pipe_w = os.pipe()
    try:
        os.write(client._resize_pipe_w, b'R')
        with patch('tilevi.client.select.select', return_value=([client._resize_pipe_r], [], [])):
            assert client.read_event() == ResizeEvent(80, 24)

        client.terminal.get_key.return_value = '<UP>'
        with patch('tilevi.client.select.select', return_value=([0], [], [])):
            assert client.read_event() == Key(KeyEvent(KeyType.SPECIAL, 'up', '<UP>'))

        client.terminal.get_key.return_value = None
        with patch('tilevi.client.select.select', return_value=([0], [], [])):
            assert client.read_event() is None
    finally:
        os.close(client._resize_pipe_r)
        os.close(client._resize_pipe_w)


def test_run_until_quit_then_destroy_modules():
    client, editor, command = editor_client(bsp_depth=2)
    watcher = RecordingModule()
    client.attach_module(watcher, focus=False)
    previous_handler = signal.getsignal(signal.SIGWINCH)

    events = [None, Key(char(':')), Key(char('q')), Key(special('enter'))]
    with patch.object(client, 'read_event', side_effect=events):
        assert client.run() == 0

    assert client.running is False
    assert watcher.destroyed
    assert signal.getsignal(signal.SIGWINCH) == previous_handler
    assert client._resize_pipe_r is None


def test_run_restores_signal_handler_on_error():
    client = make_client()
    client.attach_module(RecordingModule())
    previous_handler = signal.getsignal(signal.SIGWINCH)

    with patch.object(client, 'read_event', side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            client.run()

    assert signal.getsignal(signal.SIGWINCH) == previous_handler


def test_write_command_saves_and_shows_confirmation(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_bytes(b"ab\n")
    client, editor, command = editor_client()
    client.open_file(str(path))

    for key in (char('i'), char('X'), special('escape'), char(':'), char('w'), special('enter')):
        client.update(Key(key))

    assert path.read_bytes() == b"Xab\n"
    assert command.message == f'"{path}" 2L, 4B written'
    assert client.focus_stack == [0]
    assert editor.mode == Mode.NORMAL

    client.terminal.reset_mock()
    client.draw()
    assert call(12, 0, command.message, 80, dim=0) in client.terminal.draw_line.call_args_list


def test_editor_messages_reach_the_prompt_line(tmp_path):
    client, editor, command = editor_client()
    client.open_file(str(tmp_path / "new.txt"))
    assert command.message == f'"{tmp_path / "new.txt"}" [New]'
