"""Animated GIF encoding and small in-memory models of ACPI tables, page table entries, a boot screen and a system-call table."""

__version__ = "0.1.0"

__all__ = [
    "acpi",
    "bootscreen",
    "gif_palette",
    "gif_writer",
    "hypervisor",
    "paging",
    "syscalls",
]