# miniasm

miniasm is an assembler for a small MIPS-like instruction set. It reads
assembly source and resolves labels. It encodes each instruction as a 32-bit
word and writes the words to a file as raw little-endian bytes.

## Installation

```
pip install .
```

## Command line

```
miniasm program.s program.bin
```

With fewer than two arguments the command prints a usage line and exits with
status 1.

The assembler reports each line as it goes:

- every label it finds, with the instruction index the label refers to;
- every instruction line it parses;
- whether that instruction was added.

If any line fails, it prints how many errors there were and exits with
status 1. Nothing is written to the output file in that case, although the
file has already been created or emptied. A reference to an undefined label
also makes it exit with status 1.

On success, it prints every word as a 32-character binary string, most
significant bit first. It writes the same words to the output file as
4 bytes each, least significant byte first.

## Assembly syntax

- A line whose first non-blank character is `#` or `;` is a comment. Blank
  lines are skipped. Comments after an instruction on the same line are not
  supported.
- A line counts as a label if it has a colon and no blanks between its first
  non-blank character and the colon. The name is the text before the colon.
  Anything after the colon is ignored. The label refers to the next
  instruction.
- Operands are separated by commas and/or whitespace.

Instructions:

| Kind   | Mnemonics                             | Form                   |
|--------|---------------------------------------|------------------------|
| R-type | `add sub and or xor sll srl sra jr`   | `add $rd, $rs, $rt`    |
| I-type | `addi lh sh`                          | `addi $rt, $rs, imm`   |
| I-type | `lw sw`                               | `lw $rt, offset($rs)`  |
| I-type | `beq bneq bltz bgtz blt bgt`          | `beq $rs, $rt, label`  |

Operand counts:

- An R-type or I-type instruction written with the wrong number of operands
  is still accepted. The operands it lacks are encoded as zero.
- A branch target must be a label name: letters, digits and `_`, not starting
  with a digit. A numeric branch target is an error.
- The immediate of `addi`, `lh` and `sh`, and the offset of `lw`/`sw`, may be
  decimal, hex (`0x…`) or binary (`0b…`). They are truncated to a signed
  16-bit value. Text that is not a number reads as 0.

Registers:

| Register        | Number |
|-----------------|--------|
| `$zero`         | 0      |
| `$v0`–`$v1`     | 1–2    |
| `$a0`–`$a4`     | 3–7    |
| `$r0`–`$r15`    | 9–24   |
| `$s0`–`$s4`     | 23–27  |

Any other register name is an error. This includes `$sp` and `$ra`: they
begin with the letters of the `$s` and `$r` banks and are read as those.

A branch target becomes an offset relative to the next instruction. For
example, a branch at index 1 to a label at index 0 gets an offset of −2.

### Jumps

`j` and `jal` are recognised, and parsing fills in their target. The target
can be a label, a decimal address or a `0x…` hex address. Their opcodes
(`0xFF` and `0xFE`) do not fit the 6-bit opcode field, however, so validation
rejects them. Every `j` or `jal` line is reported as an error.

## Library use

```python
from miniasm.assembler import Assembler
from miniasm.instruction import parse_instruction

asm = Assembler()
asm.add_label("loop", 0)
asm.add_instruction(parse_instruction("addi $r0, $r0, 1"))
asm.add_instruction(parse_instruction("beq $r0, $r1, loop"))
words = asm.generate_machine_code()   # list of ints
```

`miniasm.instruction`:

- `parse_instruction(line)` returns an `Instruction`. Its `type` is an
  `InstructionType`, or `None` when the line cannot be parsed. It also has
  `fields` (an `RTypeFields`, `ITypeFields` or `JTypeFields`) and a
  `label_ref`.
- `find_instruction(name)` looks up a mnemonic in the instruction table.
- `is_valid_register(reg)` checks a register name. `parse_register(reg)`
  returns its number and raises `ValueError` for an invalid name.
- Also available: `parse_immediate(imm)`, `parse_address(addr)` and
  `is_label_reference(token)`.

`miniasm.assembler`:

- `Assembler.add_instruction(instruction)` validates the instruction and
  raises `InvalidInstructionError` if it is invalid.
- `Assembler.add_label(name, instruction_line)` raises `LabelError` once 1024
  labels are stored.
- `Assembler.find_label(name)` returns the instruction index of the first
  label with that name, or `None`.
- `Assembler.generate_machine_code()` resolves labels and returns the words.
  It raises `LabelError` for an undefined label.
- The module-level helpers validate and encode each format:
  `validate_instruction`, `validate_r_type`, `validate_i_type`,
  `validate_j_type`, `r_type_to_machine_code`, `i_type_to_machine_code`,
  `j_type_to_machine_code` and `is_label_line`.

`InvalidInstructionError` and `LabelError` are subclasses of
`AssemblerError`.

`miniasm.cli`:

- `instruction_to_str(word)` and `instruction_to_bytes(word)` give the binary
  text and the 4-byte form of a word.
- `assemble_lines(lines, assembler)` feeds source lines to an assembler and
  returns the error count.

## Tests

```
pip install .[test]
pytest
```