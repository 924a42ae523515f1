import pytest

from miniasm.assembler import Assembler, i_type_to_machine_code, r_type_to_machine_code
from miniasm.cli import assemble_lines, instruction_to_bytes, instruction_to_str, main
from miniasm.instruction import parse_instruction


def test_instruction_to_str_zero():
    assert instruction_to_str(0) == "0" * 32


@pytest.mark.parametrize("word", [1, 0x80000000, 0xDEADBEEF, 0xFFFFFFFF])
def test_instruction_to_str_round_trip(word):
    text = instruction_to_str(word)
    assert len(text) == 32
    assert int(text, 2) == word


@pytest.mark.parametrize("word", [0, 1, 0x12345678, 0xFFFFFFFF])
def test_instruction_to_bytes_little_endian(word):
    data = instruction_to_bytes(word)
    assert len(data) == 4
    assert int.from_bytes(data, "little") == word


def test_instruction_to_bytes_order():
    assert instruction_to_bytes(0x04030201) == bytes([1, 2, 3, 4])


def test_assemble_lines_skips_comments_and_records_labels(capsys):
    assembler = Assembler()
    lines = [
        "# header\n",
        "; another\n",
        "\n",
        "start:\n",
        "add $r1, $r2, $r3\n",
        "  loop:\n",
        "sub $r1, $r1, $r2\n",
        "beq $r1, $zero, loop\n",
    ]
    errors = assemble_lines(lines, assembler)
    assert errors == 0
    assert len(assembler.instructions) == 3
    assert assembler.find_label("start") == 0
    assert assembler.find_label("loop") == 1
    out = capsys.readouterr().out
    assert "Successfully added instruction on line 5" in out


def test_assemble_lines_counts_errors(capsys):
    assembler = Assembler()
    errors = assemble_lines(["foo $r1\n", "add $r1, $r2, $r3\n", "add $q1, $r2, $r3\n"], assembler)
    assert errors == 2
    assert len(assembler.instructions) == 1
    out = capsys.readouterr().out
    assert "Error on line 1: Invalid instruction provided" in out
    assert "Error on line 3: Invalid instruction provided" in out


def test_main_requires_two_arguments(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().out


def test_main_missing_source(tmp_path, capsys):
    missing = tmp_path / "absent.s"
    assert main([str(missing), str(tmp_path / "out.bin")]) == 1
    assert "Failed to open assembly file" in capsys.readouterr().out


def test_main_writes_machine_code(tmp_path, capsys):
    source = tmp_path / "prog.s"
    dest = tmp_path / "prog.bin"
    source.write_text("add $r1, $r2, $r3\naddi $r4, $r5, 10\n")
    assert main([str(source), str(dest)]) == 0

    data = dest.read_bytes()
    assert len(data) == 8
    first = r_type_to_machine_code(parse_instruction("add $r1, $r2, $r3").fields)
    second = i_type_to_machine_code(parse_instruction("addi $r4, $r5, 10").fields)
    assert data[:4] == instruction_to_bytes(first)
    assert data[4:] == instruction_to_bytes(second)
    out = capsys.readouterr().out
    assert instruction_to_str(first) in out
    assert "Machine code generated successfully:" in out


def test_main_resolves_branch_label(tmp_path):
    source = tmp_path / "loop.s"
    dest = tmp_path / "loop.bin"
    source.write_text("loop:\nsub $r1, $r1, $r2\nbgt $r1, $zero, loop\n")
    assert main([str(source), str(dest)]) == 0
    data = dest.read_bytes()
    branch_word = int.from_bytes(data[4:8], "little")
    assert branch_word & 0xFFFF == 0xFFFE


def test_main_reports_assembly_errors(tmp_path, capsys):
    source = tmp_path / "bad.s"
    source.write_text("bogus $r1\n")
    assert main([str(source), str(tmp_path / "bad.bin")]) == 1
    assert "Assembly failed with 1 errors" in capsys.readouterr().out


def test_main_reports_undefined_label(tmp_path, capsys):
    source = tmp_path / "undef.s"
    source.write_text("beq $r1, $r2, nowhere\n")
    assert main([str(source), str(tmp_path / "undef.bin")]) == 1
    assert "Failed to generate machine code" in capsys.readouterr().out