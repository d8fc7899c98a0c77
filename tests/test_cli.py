"""
Command line tests: run, disasm and chain sub-commands through main(argv).
"""

import pytest

import intcode


@pytest.fixture
def program_file(tmp_path):
    """Write program text to a file and return its path as a string."""
    def write(text, name="input.txt"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return write


class TestRun:
    """The run sub-command."""

    def test_queued_input(self, program_file, capsys):
        path = program_file("3,9,8,9,10,9,4,9,99,-1,8")
        assert intcode.main(["run", path, "-i", "8"]) == 0
        assert capsys.readouterr().out.strip() == "1"

    def test_patch_and_dump(self, program_file, capsys):
        path = program_file("1,0,0,3,99,0,0,0,0,30,40,50")
        assert intcode.main(["run", path, "--set", "1=9", "--set", "2=10", "--dump-memory"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[-1] == "1,9,10,70,99,0,0,0,0,30,40,50"

    def test_missing_input_fails(self, program_file, capsys):
        path = program_file("3,0,4,0,99")
        assert intcode.main(["run", path]) == 1
        assert "queue is empty" in capsys.readouterr().err

    def test_interactive(self, program_file, capsys, monkeypatch):
        answers = iter(["5", "6"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        path = program_file("3,0,4,0,3,0,4,0,99")
        assert intcode.main(["run", path, "--interactive"]) == 0
        assert capsys.readouterr().out.split() == ["5", "6"]

    def test_trace(self, program_file, capsys):
        path = program_file("104,3,99")
        assert intcode.main(["run", path, "--trace"]) == 0
        out = capsys.readouterr().out
        assert "OUT #3" in out
        assert "HALT" in out

    def test_bad_assignment(self, program_file):
        path = program_file("99")
        assert intcode.main(["run", path, "--set", "12"]) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert intcode.main(["run", str(tmp_path / "nope.txt")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_log_file(self, program_file, tmp_path):
        path = program_file("99")
        log_path = tmp_path / "logs" / "run.log"
        assert intcode.main(["--log-file", str(log_path), "run", path]) == 0
        assert "terminated" in log_path.read_text()


class TestDisasm:
    """The disasm sub-command."""

    def test_listing(self, program_file, capsys):
        path = program_file("1002,4,3,4,33")
        assert intcode.main(["disasm", path]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].endswith("MUL [4], #3, [4]")
        assert lines[1].endswith("DATA 33")


class TestChain:
    """The chain sub-command, serial and feedback."""

    SERIAL = "3,15,3,16,1002,16,10,16,1,16,15,15,4,15,99,0,0"

    def test_single(self, program_file, capsys):
        path = program_file(self.SERIAL)
        assert intcode.main(["chain", path, "--phases", "4,3,2,1,0"]) == 0
        assert capsys.readouterr().out.strip() == "43210"

    def test_search(self, program_file, capsys):
        path = program_file(self.SERIAL)
        assert intcode.main(["chain", path, "--phases", "0,1,2,3,4", "--search"]) == 0
        assert capsys.readouterr().out.strip() == "43210 4,3,2,1,0"

    @pytest.mark.parametrize("extra", [[], ["--feedback"]])
    def test_empty_phase_list(self, program_file, extra):
        path = program_file(self.SERIAL)
        assert intcode.main(["chain", path, "--phases", ","] + extra) == 1


def test_no_command(capsys):
    assert intcode.main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        intcode.main(["--version"])
    assert info.value.code == 0
