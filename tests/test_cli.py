"""Tests for the command-line host."""

import importlib
import sys
import types

from chip8vm import StackUnderflowError, KEYPAD_LAYOUT
from chip8vm.logging import ConsoleLogger
import chip8vm.cli as cli


def write_rom(tmp_path, words):
    path = tmp_path / "test.ch8"
    path.write_bytes(b"".join(word.to_bytes(2, "big") for word in words))
    return str(path)


def quiet_logger():
    return ConsoleLogger(name="test", use_colors=False, show_timestamps=False)


class TestHeadless:
    """Test running ROMs without a window."""

    def test_imports_without_pygame(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "pygame", None)
        module = importlib.reload(cli)
        assert module.run_headless is not None

    def test_prints_final_frame(self, tmp_path, capsys):
        rom = write_rom(tmp_path, [0x00E0, 0x1202])  # clear, then spin
        error = cli.run_headless(rom, 2, logger=quiet_logger())
        assert error is None

        lines = capsys.readouterr().out.splitlines()
        frame = [line for line in lines if set(line) == {"."}]
        assert len(frame) == 32
        assert all(len(line) == 64 for line in frame)

    def test_reports_fault_by_name(self, tmp_path, capsys):
        rom = write_rom(tmp_path, [0x00EE])
        error = cli.run_headless(rom, 1, logger=quiet_logger())
        assert isinstance(error, StackUnderflowError)
        assert error.pc == 0x200

        out = capsys.readouterr().out
        assert "[   ERROR][test] StackUnderflowError" in out
        assert "pc=0x200" in out

    def test_main_headless(self, tmp_path, capsys):
        rom = write_rom(tmp_path, [0x1200])
        cli.main([rom, "--headless", "1"])
        assert "." * 64 in capsys.readouterr().out


class TestArguments:
    """Test argument parsing and the key map."""

    def test_defaults(self):
        args = cli.build_parser().parse_args(["game.ch8"])
        assert args.rom == "game.ch8"
        assert args.scale == 8
        assert args.colors == "classic"
        assert not args.shift_uses_vy
        assert args.headless is None

    def test_key_map_follows_keypad_layout(self):
        names = "1234qwerasdfzxcv"
        fake_pygame = types.SimpleNamespace(**{f"K_{name}": name for name in names})
        key_map = cli.build_key_map(fake_pygame)

        assert len(key_map) == 16
        assert key_map["1"] == KEYPAD_LAYOUT[0][0]
        assert key_map["r"] == KEYPAD_LAYOUT[1][3]
        assert key_map["x"] == KEYPAD_LAYOUT[3][1]
        assert sorted(key_map.values()) == list(range(16))
