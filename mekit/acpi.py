"""Lookup of ACPI system description tables in a memory image.

The memory image is any bytes-like object; offsets into it stand in for
physical addresses.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

_SDT_FORMAT = struct.Struct("<4sIBB6s8sIII")
_RSDP_TAIL_FORMAT = struct.Struct("<IQB3s")
_ENTRY_STRIDE = 8

NOT_FOUND = -1
NULL_SIGNATURE = -2
EMPTY_SIGNATURE = -3


class AcpiError(Exception):
    """Raised when a table cannot be read or a lookup fails.

    ``code`` carries the lookup error number where there is one.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class AddressSpace(IntEnum):
    SYSTEM_MEMORY = 0
    SYSTEM_IO = 1
    PCI = 2
    CONTROLLER = 3
    SM_BUS = 4
    INVALID = 0xFF


def checksum(data):
    """True when the bytes of ``data`` add up to zero modulo 256.

    An empty sequence counts as passing.
    """
    if len(data) == 0:
        return True
    return sum(data) & 0xFF == 0


def _unpack(fmt: struct.Struct, data, offset: int) -> tuple:
    if offset < 0:
        raise AcpiError(f"negative table offset {offset}")
    try:
        return fmt.unpack_from(data, offset)
    except struct.error as exc:
        raise AcpiError(f"table at offset {offset} runs past the end of memory") from exc


@dataclass(frozen=True)
class SDT:
    """System description table header."""

    SIZE: ClassVar[int] = _SDT_FORMAT.size

    signature: bytes
    length: int
    revision: int
    checksum: int
    oem_id: bytes
    oem_table_id: bytes
    oem_rev: int
    creator_id: int
    creator_revision: int

    @classmethod
    def parse(cls, data, offset=0):
        """Read a header from ``data`` at ``offset``."""
        return cls(*_unpack(_SDT_FORMAT, data, offset))


@dataclass(frozen=True)
class RSDP(SDT):
    """Root system description pointer: a header followed by table addresses."""

    SIZE: ClassVar[int] = _SDT_FORMAT.size + _RSDP_TAIL_FORMAT.size

    rsdt_address: int
    xsdt_address: int
    extended_checksum: int
    reserved: bytes

    @classmethod
    def parse(cls, data, offset=0):
        """Read a root pointer from ``data`` at ``offset``."""
        head = _unpack(_SDT_FORMAT, data, offset)
        tail = _unpack(_RSDP_TAIL_FORMAT, data, offset + _SDT_FORMAT.size)
        return cls(*head, *tail)


def _signature_bytes(signature) -> bytes:
    if signature is None:
        raise AcpiError("no signature given", NULL_SIGNATURE)
    if isinstance(signature, str):
        signature = signature.encode("latin-1")
    signature = bytes(signature)
    if not signature or signature[0] == 0:
        raise AcpiError("empty signature", EMPTY_SIGNATURE)
    return signature


class ACPIManager:
    """Finds tables reachable from a root system description pointer."""

    def __init__(self, memory, rsdp_offset=0):
        if memory is None:
            raise AcpiError("no root system description pointer")
        self._memory = memory
        self.rsdp = RSDP.parse(memory, rsdp_offset)
        if self.rsdp.revision < 2:
            raise AcpiError(
                f"root pointer revision {self.rsdp.revision} is older than 2"
            )
        self.power_requests: list[str] = []

    def find(self, signature):
        """Return the offset of the table whose signature is ``signature``.

        Raises AcpiError with code -2 for no signature, -3 for an empty one,
        -1 when nothing matches, and without a code when an entry fails its
        signature checksum.
        """
        wanted = _signature_bytes(signature)
        xsdt = self.rsdp.xsdt_address
        count = (self.rsdp.length + SDT.SIZE) // _ENTRY_STRIDE

        for index in range(count):
            offset = xsdt + SDT.SIZE + index * _ENTRY_STRIDE
            sdt = SDT.parse(self._memory, offset)
            if not checksum(sdt.signature):
                raise AcpiError(f"bad signature checksum in table at offset {offset}")
            if sdt.signature == wanted:
                return offset

        raise AcpiError(f"no table with signature {wanted!r}", NOT_FOUND)

    def shutdown(self):
        """Record a power-off request; a memory image has no machine to stop."""
        self.power_requests.append("shutdown")

    def reset(self):
        """Record a soft-reboot request; a memory image has no machine to reboot."""
        self.power_requests.append("reset")

    def __getitem__(self, signature):
        return self.find(signature)