[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mekit"
version = "0.1.0"
description = "Animated GIF encoding plus small in-memory models of ACPI tables, page table entries, a text-mode boot screen and a system-call table"
requires-python = ">=3.10"
dependencies = []
keywords = ["gif", "lzw", "palette", "dithering", "acpi", "paging", "syscall"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
