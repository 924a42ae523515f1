[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniasm"
version = "0.1.0"
description = "A small assembler for a MIPS-like 32-bit instruction set"
requires-python = ">=3.10"
dependencies = []
keywords = ["assembler", "mips", "machine-code", "isa"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Assemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
miniasm = "miniasm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["miniasm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
