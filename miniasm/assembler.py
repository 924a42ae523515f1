"""Instruction validation, label resolution and machine-code generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from miniasm.instruction import (
    Instruction,
    InstructionType,
    ITypeFields,
    JTypeFields,
    RTypeFields,
)

BUFFER_SIZE = 1024
MAX_LABEL_LENGTH = 255

_REGISTER_MAX = 31
_SHAMT_MAX = 31
_OPCODE_MAX = 63
_FUNCT_MAX = 63
_ADDRESS_MAX = 0x3FFFFFF


class AssemblerError(Exception):
    """Base class for assembler failures."""


class InvalidInstructionError(AssemblerError):
    """An instruction failed validation."""


class LabelError(AssemblerError):
    """A label could not be stored or resolved."""


@dataclass(frozen=True)
class Label:
    """A named position in the instruction stream."""

    name: str
    instruction_line: int


def _in_range(value: int, limit: int) -> bool:
    return 0 <= value <= limit


def validate_r_type(fields: RTypeFields) -> bool:
    """Tell whether register-format fields fit their bit widths."""
    return (
        all(_in_range(reg, _REGISTER_MAX) for reg in (fields.rs, fields.rt, fields.rd))
        and _in_range(fields.shamt, _SHAMT_MAX)
        and _in_range(fields.opcode, _OPCODE_MAX)
        and _in_range(fields.funct, _FUNCT_MAX)
    )


def validate_i_type(fields: ITypeFields) -> bool:
    """Tell whether immediate-format fields fit their bit widths."""
    return (
        _in_range(fields.rs, _REGISTER_MAX)
        and _in_range(fields.rt, _REGISTER_MAX)
        and _in_range(fields.opcode, _OPCODE_MAX)
    )


def validate_j_type(fields: JTypeFields) -> bool:
    """Tell whether jump-format fields fit their bit widths."""
    return _in_range(fields.opcode, _OPCODE_MAX) and _in_range(fields.address, _ADDRESS_MAX)


_VALIDATORS: dict[InstructionType, Callable[..., bool]] = {
    InstructionType.R_TYPE: validate_r_type,
    InstructionType.I_TYPE: validate_i_type,
    InstructionType.J_TYPE: validate_j_type,
}


def validate_instruction(instruction: Instruction) -> bool:
    """Tell whether an instruction has a known type and valid fields."""
    if instruction.type is None or instruction.fields is None:
        return False
    return _VALIDATORS[instruction.type](instruction.fields)


def r_type_to_machine_code(fields: RTypeFields) -> int:
    """Encode register-format fields as a 32-bit word."""
    return (
        ((fields.opcode & 0x3F) << 26)
        | ((fields.rs & 0x1F) << 21)
        | ((fields.rt & 0x1F) << 16)
        | ((fields.rd & 0x1F) << 11)
        | ((fields.shamt & 0x1F) << 6)
        | (fields.funct & 0x3F)
    )


def i_type_to_machine_code(fields: ITypeFields) -> int:
    """Encode immediate-format fields as a 32-bit word."""
    return (
        ((fields.opcode & 0x3F) << 26)
        | ((fields.rs & 0x1F) << 21)
        | ((fields.rt & 0x1F) << 16)
        | (fields.immediate & 0xFFFF)
    )


def j_type_to_machine_code(fields: JTypeFields) -> int:
    """Encode jump-format fields as a 32-bit word."""
    return ((fields.opcode & 0x3F) << 26) | (fields.address & 0x3FFFFFF)


_ENCODERS: dict[InstructionType, Callable[..., int]] = {
    InstructionType.R_TYPE: r_type_to_machine_code,
    InstructionType.I_TYPE: i_type_to_machine_code,
    InstructionType.J_TYPE: j_type_to_machine_code,
}


def _to_int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def is_label_line(line: str) -> bool:
    """Tell whether a source line defines a label (``name:`` with no blanks in the name)."""
    trimmed = line.lstrip(" \t")
    if not trimmed or trimmed[0] in "\n#;":
        return False
    name, colon, _ = trimmed.partition(":")
    if not colon:
        return False
    return " " not in name and "\t" not in name


class Assembler:
    """Collects instructions and labels and turns them into machine code."""

    def __init__(self) -> None:
        self.instructions: list[Instruction] = []
        self.labels: list[Label] = []
        self.machine_code: list[int] = []

    def add_instruction(self, instruction: Instruction) -> None:
        """Validate an instruction and append it; raise InvalidInstructionError if invalid."""
        if not validate_instruction(instruction):
            raise InvalidInstructionError("Invalid instruction provided")
        self.instructions.append(instruction)

    def add_label(self, name: str, instruction_line: int) -> None:
        """Record a label; raise LabelError once the label table is full."""
        if len(self.labels) >= BUFFER_SIZE:
            raise LabelError(f"label table is full, cannot add {name!r}")
        self.labels.append(Label(name[:MAX_LABEL_LENGTH], instruction_line))

    def find_label(self, name: str) -> Optional[int]:
        """Return the instruction line of the first label with this name, or None."""
        return next(
            (label.instruction_line for label in self.labels if label.name == name),
            None,
        )

    def generate_machine_code(self) -> list[int]:
        """Resolve label references and encode every instruction.

        Branches get the offset from the following instruction; jumps get the
        label's instruction line. Raises LabelError for an undefined label.
        """
        words = []
        for index, instruction in enumerate(self.instructions):
            if instruction.label_ref:
                line = self.find_label(instruction.label_ref)
                if line is None:
                    raise LabelError(f"undefined label: {instruction.label_ref!r}")
                if instruction.type is InstructionType.I_TYPE:
                    instruction.fields.immediate = _to_int16(line - index - 1)
                elif instruction.type is InstructionType.J_TYPE:
                    instruction.fields.address = line & 0xFFFFFFFF
            words.append(_ENCODERS[instruction.type](instruction.fields))
        self.machine_code = words
        return list(words)