"""Instruction definitions and the parser for single assembly lines."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

MAX_LINE_LENGTH = 255
MAX_TOKENS = 10

_WS = " \t\n\v\f\r"
_TOKEN_SPLIT = re.compile(r"[ \t\n\r,]+")
_NUMBER_PATTERNS = {
    10: re.compile(rf"[{_WS}]*([+-]?)([0-9]+)"),
    16: re.compile(rf"[{_WS}]*([+-]?)(?:0[xX])?([0-9a-fA-F]+)"),
    2: re.compile(rf"[{_WS}]*([+-]?)(?:0[bB])?([01]+)"),
}
_LONG_MAX = 2**63 - 1
_LONG_MIN = -(2**63)
_ULONG_MAX = 2**64 - 1


class InstructionType(Enum):
    """The three instruction encodings."""

    R_TYPE = "R"
    I_TYPE = "I"
    J_TYPE = "J"


@dataclass
class RTypeFields:
    """Register-format fields."""

    opcode: int = 0
    rs: int = 0
    rt: int = 0
    rd: int = 0
    shamt: int = 0
    funct: int = 0


@dataclass
class ITypeFields:
    """Immediate-format fields."""

    opcode: int = 0
    rs: int = 0
    rt: int = 0
    immediate: int = 0


@dataclass
class JTypeFields:
    """Jump-format fields."""

    opcode: int = 0
    address: int = 0


Fields = Union[RTypeFields, ITypeFields, JTypeFields]


@dataclass
class Instruction:
    """A parsed instruction; ``type`` is None when the line could not be parsed."""

    type: Optional[InstructionType] = None
    fields: Optional[Fields] = None
    label_ref: str = ""


@dataclass(frozen=True)
class InstructionDef:
    """An entry of the instruction table."""

    name: str
    type: InstructionType
    opcode: int
    funct: int


INSTRUCTION_TABLE: tuple[InstructionDef, ...] = (
    InstructionDef("add", InstructionType.R_TYPE, 0x00, 0x01),
    InstructionDef("sub", InstructionType.R_TYPE, 0x00, 0x02),
    InstructionDef("and", InstructionType.R_TYPE, 0x00, 0x03),
    InstructionDef("or", InstructionType.R_TYPE, 0x00, 0x04),
    InstructionDef("xor", InstructionType.R_TYPE, 0x00, 0x05),
    InstructionDef("sll", InstructionType.R_TYPE, 0x00, 0x06),
    InstructionDef("srl", InstructionType.R_TYPE, 0x00, 0x07),
    InstructionDef("sra", InstructionType.R_TYPE, 0x00, 0x08),
    InstructionDef("jr", InstructionType.R_TYPE, 0x00, 0x09),
    InstructionDef("addi", InstructionType.I_TYPE, 0x01, 0x00),
    InstructionDef("beq", InstructionType.I_TYPE, 0x02, 0x00),
    InstructionDef("bneq", InstructionType.I_TYPE, 0x03, 0x00),
    InstructionDef("bltz", InstructionType.I_TYPE, 0x04, 0x00),
    InstructionDef("bgtz", InstructionType.I_TYPE, 0x05, 0x00),
    InstructionDef("blt", InstructionType.I_TYPE, 0x06, 0x00),
    InstructionDef("bgt", InstructionType.I_TYPE, 0x07, 0x00),
    InstructionDef("lw", InstructionType.I_TYPE, 0x08, 0x00),
    InstructionDef("sw", InstructionType.I_TYPE, 0x09, 0x00),
    InstructionDef("lh", InstructionType.I_TYPE, 0x0A, 0x00),
    InstructionDef("sh", InstructionType.I_TYPE, 0x0B, 0x00),
    InstructionDef("j", InstructionType.J_TYPE, 0xFF, 0x00),
    InstructionDef("jal", InstructionType.J_TYPE, 0xFE, 0x00),
)

_BY_NAME = {definition.name: definition for definition in INSTRUCTION_TABLE}

_MEMORY_OPS = frozenset({"lw", "sw"})
_BRANCH_OPS = frozenset({"beq", "bneq", "bltz", "bgtz", "blt", "bgt"})

# Register banks: prefix letter -> (highest index, register number of index 0).
_REGISTER_BANKS = {
    "v": (1, 1),
    "a": (4, 3),
    "r": (15, 9),
    "s": (4, 23),
}
# "$sp" and "$ra" start with a bank letter, so the bank rule decides them first
# and rejects them; only "$zero" is reachable by name.
_NAMED_REGISTERS = {"$zero": 0, "$sp": 29, "$ra": 31}


def _parse_whole_number(text: str, base: int) -> Optional[int]:
    """Read an integer that must span the whole text; an empty text reads as 0."""
    if text == "":
        return 0
    match = _NUMBER_PATTERNS[base].fullmatch(text)
    if match is None:
        return None
    sign, digits = match.groups()
    value = int(digits, base)
    return -value if sign == "-" else value


def find_instruction(name: str) -> Optional[InstructionDef]:
    """Return the table entry for a mnemonic, or None if it is unknown."""
    return _BY_NAME.get(name)


def _register_number(reg: str) -> Optional[int]:
    if not reg.startswith("$"):
        return None
    bank = _REGISTER_BANKS.get(reg[1:2])
    if bank is not None:
        limit, offset = bank
        index = _parse_whole_number(reg[2:], 10)
        if index is None or not 0 <= index <= limit:
            return None
        return index + offset
    return _NAMED_REGISTERS.get(reg)


def is_valid_register(reg: str) -> bool:
    """Tell whether a token names a register."""
    return _register_number(reg) is not None


def parse_register(reg: str) -> int:
    """Return the register number for a register name; raise ValueError if invalid."""
    number = _register_number(reg)
    if number is None:
        raise ValueError(f"invalid register: {reg!r}")
    return number


def parse_immediate(imm: str) -> int:
    """Parse a decimal, 0x hex or 0b binary immediate as a signed 16-bit value.

    Text that is not a whole number yields 0.
    """
    if imm.startswith("0x"):
        base = 16
    elif imm.startswith("0b"):
        base = 2
    else:
        base = 10
    value = _parse_whole_number(imm, base)
    if value is None:
        return 0
    value = max(_LONG_MIN, min(_LONG_MAX, value))
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def parse_address(addr: str) -> int:
    """Parse a decimal or 0x hex address as an unsigned 32-bit value.

    Text that is not a whole number yields 0.
    """
    base = 16 if addr.startswith("0x") else 10
    value = _parse_whole_number(addr, base)
    if value is None:
        return 0
    magnitude = min(abs(value), _ULONG_MAX)
    if value < 0:
        magnitude = (-magnitude) % (_ULONG_MAX + 1)
    return magnitude & 0xFFFFFFFF


def is_label_reference(token: str) -> bool:
    """Tell whether a token is a label name rather than a number."""
    if token[:1].isdigit() and token[:1].isascii():
        return False
    return all((ch.isascii() and ch.isalnum()) or ch == "_" for ch in token)


def _parse_r_type(definition: InstructionDef, tokens: list[str]) -> Instruction:
    fields = RTypeFields(opcode=definition.opcode, funct=definition.funct)
    if len(tokens) == 4:
        fields.rd = parse_register(tokens[1])
        fields.rs = parse_register(tokens[2])
        fields.rt = parse_register(tokens[3])
    return Instruction(InstructionType.R_TYPE, fields)


def _parse_memory_operand(operand: str, fields: ITypeFields) -> None:
    offset, paren, rest = operand.partition("(")
    if not paren:
        return
    fields.immediate = parse_immediate(offset)
    fields.rs = parse_register(rest.partition(")")[0])


def _parse_i_type(definition: InstructionDef, tokens: list[str]) -> Instruction:
    fields = ITypeFields(opcode=definition.opcode)
    instruction = Instruction(InstructionType.I_TYPE, fields)

    if definition.name in _MEMORY_OPS:
        if len(tokens) == 3:
            fields.rt = parse_register(tokens[1])
            _parse_memory_operand(tokens[2], fields)
        return instruction

    if len(tokens) != 4:
        return instruction

    if definition.name in _BRANCH_OPS:
        fields.rs = parse_register(tokens[1])
        fields.rt = parse_register(tokens[2])
        if not is_label_reference(tokens[3]):
            return Instruction()
        instruction.label_ref = tokens[3][:MAX_LINE_LENGTH]
        return instruction

    fields.rt = parse_register(tokens[1])
    fields.rs = parse_register(tokens[2])
    fields.immediate = parse_immediate(tokens[3])
    return instruction


def _parse_j_type(definition: InstructionDef, tokens: list[str]) -> Instruction:
    fields = JTypeFields(opcode=definition.opcode)
    instruction = Instruction(InstructionType.J_TYPE, fields)
    if len(tokens) == 2:
        target = tokens[1]
        if is_label_reference(target):
            instruction.label_ref = target[:MAX_LINE_LENGTH]
        else:
            fields.address = parse_address(target)
    return instruction


_PARSERS = {
    InstructionType.R_TYPE: _parse_r_type,
    InstructionType.I_TYPE: _parse_i_type,
    InstructionType.J_TYPE: _parse_j_type,
}


def parse_instruction(line: str) -> Instruction:
    """Parse one line of assembly.

    An unknown mnemonic, an invalid register or a branch target that is not a
    label gives an Instruction whose ``type`` is None.
    """
    tokens = [t for t in _TOKEN_SPLIT.split(line[:MAX_LINE_LENGTH]) if t][:MAX_TOKENS]
    if not tokens:
        return Instruction()
    definition = find_instruction(tokens[0])
    if definition is None:
        return Instruction()
    try:
        return _PARSERS[definition.type](definition, tokens)
    except ValueError:
        return Instruction()