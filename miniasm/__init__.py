"""An assembler for a small MIPS-like instruction set: parsing, validation and encoding to 32-bit words."""

__version__ = "0.1.0"