# tests/test_cli.py
from __future__ import annotations

import io
import os
from dataclasses import dataclass, field
from pathlib import Path

import pytest

import wish_shell.cli as cli
from wish_shell.config import ERROR_MESSAGE, PROMPT
from wish_shell.executor import RunResult
from wish_shell.kernel import Kernel
from wish_shell.state import ShellState


@dataclass
class FakeUI:
    """
    UI abstraction used by CLI:
      - read(prompt) -> str
    """

    inputs: list[str]
    prompts: list[str] = field(default_factory=list)

    def read(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.inputs:
            raise EOFError
        item = self.inputs.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


# -------------------------------------------------------------------
# Helper: Create fake dependencies for Kernel
# -------------------------------------------------------------------


class FakeConfig:
    prompt = PROMPT
    error_message = ERROR_MESSAGE
    default_path = ["/bin"]

    def get_path(self, path, default=None):
        return default


class FakeExecutor:
    def __init__(self):
        self.commands: list[list[str]] = []

    def run(self, argv, state, output_file=None) -> RunResult:
        self.commands.append(list(argv))
        return RunResult(0, f"/bin/{argv[0]}", "2025-12-14T10:00:00", 0)


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def kernel(executor: FakeExecutor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Kernel:
    monkeypatch.chdir(tmp_path)
    return Kernel(
        executor=executor,
        config=FakeConfig(),
        state=ShellState(search_path=["/bin"], cwd=os.getcwd()),
    )


# -------------------------------------------------------------------
# run_repl
# -------------------------------------------------------------------


def test_repl_prompts_before_each_read_and_stops_on_eof(kernel, executor) -> None:
    inputs = ["ls", "", "echo hi"]
    prompts: list[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        if not inputs:
            raise EOFError
        return inputs.pop(0)

    status = cli.run_repl(kernel, input_fn=fake_input)

    assert status == 0
    assert prompts == ["wish> "] * 4
    assert executor.commands == [["ls"], ["echo", "hi"]]
    assert kernel.running is False


def test_repl_exit_returns_zero_and_stops_reading(kernel, executor) -> None:
    ui = FakeUI(inputs=["ls", "exit", "echo never"])

    assert cli.run_repl(kernel, ui=ui) == 0

    assert executor.commands == [["ls"]]
    assert ui.inputs == ["echo never"]
    assert kernel.running is False


def test_repl_exit_with_argument_continues(kernel, executor, capfd) -> None:
    ui = FakeUI(inputs=["exit 1", "ls"])

    assert cli.run_repl(kernel, ui=ui) == 0

    assert executor.commands == [["ls"]]
    assert capfd.readouterr().err == ERROR_MESSAGE


def test_repl_keyboard_interrupt_discards_line(kernel, executor) -> None:
    ui = FakeUI(inputs=[KeyboardInterrupt(), "ls"])

    assert cli.run_repl(kernel, ui=ui) == 0

    assert executor.commands == [["ls"]]
    assert len(ui.prompts) == 3


def test_repl_survives_unexpected_exception(
    kernel, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.setenv("WISH_DATA_HOME", str(tmp_path / "data"))
    calls = {"n": 0}

    def flaky_handle_line(line: str) -> list[int]:
        calls["n"] += 1
        raise RuntimeError("unexpected")

    monkeypatch.setattr(kernel, "handle_line", flaky_handle_line)
    ui = FakeUI(inputs=["one", "two"])

    assert cli.run_repl(kernel, ui=ui) == 0

    assert calls["n"] == 2
    assert capfd.readouterr().err == ERROR_MESSAGE * 2
    crash_log = tmp_path / "data" / "wish" / "logs" / "crash.log"
    assert "RuntimeError: unexpected" in crash_log.read_text()


# -------------------------------------------------------------------
# run_batch
# -------------------------------------------------------------------


def test_batch_runs_every_line_without_prompt(kernel, executor, capfd) -> None:
    status = cli.run_batch(kernel, ["ls\n", "\n", "&\n", "echo a & echo b\n"])

    assert status == 0
    assert sorted(executor.commands) == [["echo", "a"], ["echo", "b"], ["ls"]]
    assert capfd.readouterr().out == ""


def test_batch_stops_at_exit(kernel, executor) -> None:
    assert cli.run_batch(kernel, ["ls\n", "exit\n", "pwd\n"]) == 0

    assert executor.commands == [["ls"]]


# -------------------------------------------------------------------
# main
# -------------------------------------------------------------------


def test_main_rejects_more_than_one_argument(capfd) -> None:
    assert cli.main(["a", "b"]) == 1

    assert capfd.readouterr().err == ERROR_MESSAGE


def test_main_unreadable_batch_file(tmp_path: Path, capfd) -> None:
    assert cli.main([str(tmp_path / "missing.txt")]) == 1

    assert capfd.readouterr().err == ERROR_MESSAGE


def test_main_batch_directory_is_unreadable(tmp_path: Path, capfd) -> None:
    assert cli.main([str(tmp_path)]) == 1

    assert capfd.readouterr().err == ERROR_MESSAGE


def test_main_batch_mode_runs_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.chdir(tmp_path)
    batch = tmp_path / "batch.txt"
    batch.write_text("echo hello\n\n  &  \nls > > x\nexit\necho never\n")

    assert cli.main([str(batch)]) == 0

    captured = capfd.readouterr()
    assert captured.out == "hello\n"
    assert captured.err == ERROR_MESSAGE


def test_main_batch_redirect_and_parallel(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    batch = tmp_path / "batch.txt"
    batch.write_text("echo one>one.txt & echo two > two.txt\n")

    assert cli.main([str(batch)]) == 0

    assert (tmp_path / "one.txt").read_text() == "one\n"
    assert (tmp_path / "two.txt").read_text() == "two\n"


def test_main_interactive_without_tty_uses_input(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WISH_LEGACY_UI", "1")
    monkeypatch.setattr("sys.stdin", io.StringIO("echo hi\nexit\n"))

    assert cli.main([]) == 0

    out = capfd.readouterr().out
    assert out.startswith("wish> ")
    assert "hi\n" in out
    assert out.count("wish> ") == 2


def test_main_interactive_eof_returns_zero(
    monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.setenv("WISH_LEGACY_UI", "1")
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    assert cli.main([]) == 0

    assert capfd.readouterr().out == "wish> "


def test_main_uses_prompt_toolkit_ui_on_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    created = []

    class RecordingUI:
        def __init__(self, kernel):
            created.append(kernel)

        def read(self, prompt: str) -> str:
            raise EOFError

    monkeypatch.delenv("WISH_LEGACY_UI", raising=False)
    monkeypatch.setattr(cli, "_wants_prompt_toolkit", lambda: True)
    monkeypatch.setattr(cli, "PromptToolkitUI", RecordingUI)

    assert cli.main([]) == 0
    assert len(created) == 1
    assert created[0].state.search_path == ["/bin"]
    assert created[0].state.isolated is False


def test_main_wires_search_path_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    created = []

    class RecordingUI:
        def __init__(self, kernel):
            created.append(kernel)

        def read(self, prompt: str) -> str:
            raise EOFError

    cfg = cli.config.YAMLConfig({"shell": {"default_path": ["/usr/bin", "/bin"]}})
    monkeypatch.setattr(cli.config, "load_system_config", lambda: cfg)
    monkeypatch.setattr(cli, "_wants_prompt_toolkit", lambda: True)
    monkeypatch.setattr(cli, "PromptToolkitUI", RecordingUI)

    assert cli.main([]) == 0
    assert created[0].state.search_path == ["/usr/bin", "/bin"]


def test_main_batch_passes_non_utf8_bytes_through(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.chdir(tmp_path)
    batch = tmp_path / "batch.txt"
    batch.write_bytes(b"echo \xff > o.txt\n")

    assert cli.main([str(batch)]) == 0

    assert (tmp_path / "o.txt").read_bytes() == b"\xff\n"
    assert capfd.readouterr().err == ""


def test_main_batch_lone_carriage_return_stays_in_line(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capfd
) -> None:
    monkeypatch.chdir(tmp_path)
    batch = tmp_path / "batch.txt"
    batch.write_bytes(b"echo a\rb > o.txt\n")

    assert cli.main([str(batch)]) == 0

    assert (tmp_path / "o.txt").read_bytes() == b"a\rb\n"
    captured = capfd.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_main_batch_accepts_crlf_line_endings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    batch = tmp_path / "batch.txt"
    batch.write_bytes(b"echo one > one.txt\r\necho two > two.txt\r\n")

    assert cli.main([str(batch)]) == 0

    assert (tmp_path / "one.txt").read_bytes() == b"one\n"
    assert (tmp_path / "two.txt").read_bytes() == b"two\n"
