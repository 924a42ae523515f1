"""Command line front end: assemble a source file into a binary image."""

from __future__ import annotations

import sys
from typing import Iterable, Iterator, Optional, TextIO

from miniasm.assembler import Assembler, AssemblerError, LabelError, is_label_line
from miniasm.instruction import parse_instruction

_READ_CHUNK = 255


def instruction_to_str(word: int) -> str:
    """Render a word as 32 binary digits, most significant first."""
    return format(word & 0xFFFFFFFF, "032b")


def instruction_to_bytes(word: int) -> bytes:
    """Return a word as four little-endian bytes."""
    return (word & 0xFFFFFFFF).to_bytes(4, "little")


def _read_lines(stream: TextIO) -> Iterator[str]:
    """Yield lines, splitting any longer than the line buffer into pieces."""
    for line in stream:
        while len(line) > _READ_CHUNK:
            yield line[:_READ_CHUNK]
            line = line[_READ_CHUNK:]
        yield line


def assemble_lines(lines: Iterable[str], assembler: Assembler) -> int:
    """Feed source lines to the assembler, reporting progress; return the error count."""
    error_count = 0
    for line_number, raw in enumerate(lines, start=1):
        if raw.lstrip(" \t")[:1] in ("", "\n", "#", ";"):
            continue
        line = raw.partition("\n")[0]
        trimmed = line.lstrip(" \t")

        if is_label_line(line):
            print(
                f"Found label on line {line_number} referencing "
                f"{len(assembler.instructions)}: {line}"
            )
            label_name = trimmed.partition(":")[0]
            try:
                assembler.add_label(label_name, len(assembler.instructions))
            except LabelError:
                print(f"Error adding label '{label_name}' on line {line_number}")
                error_count += 1
            continue

        print(f"Parsing line {line_number}: {line}")
        try:
            assembler.add_instruction(parse_instruction(line))
        except AssemblerError as error:
            print(f"Error on line {line_number}: {error}")
            error_count += 1
        else:
            print(f"Successfully added instruction on line {line_number}")
    return error_count


def main(argv: Optional[list[str]] = None) -> int:
    """Assemble ``argv[0]`` into ``argv[1]``; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print("Usage: miniasm <assembly_file> <output_file>")
        return 1
    source_path, dest_path = args[0], args[1]

    try:
        source = open(source_path, encoding="utf-8", errors="surrogateescape", newline="")
    except OSError:
        print(f"Failed to open assembly file: {source_path}")
        return 1

    with source:
        try:
            dest = open(dest_path, "wb")
        except OSError:
            print(f"Failed to open output file: {dest_path}")
            return 1
        with dest:
            assembler = Assembler()
            error_count = assemble_lines(_read_lines(source), assembler)
            if error_count > 0:
                print(f"\nAssembly failed with {error_count} errors")
                return 1

            print("\nGenerating machine code...")
            try:
                words = assembler.generate_machine_code()
            except LabelError:
                print("Failed to generate machine code")
                return 1

            print("Machine code generated successfully:")
            for word in words:
                print(instruction_to_str(word))
                dest.write(instruction_to_bytes(word))
    return 0


if __name__ == "__main__":
    sys.exit(main())