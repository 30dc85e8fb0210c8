import struct

import pytest

from mekit.acpi import (
    ACPIManager,
    AcpiError,
    AddressSpace,
    RSDP,
    SDT,
    checksum,
)

XSDT = 64
GOOD_SIG = b"\x01\x02\x03\xfa"  # bytes sum to 256


def _sdt_bytes(signature, length=0, revision=0):
    return struct.pack(
        "<4sIBB6s8sIII", signature, length, revision, 0, b"OEMID\0", b"TABLEID\0", 1, 2, 3
    )


def _memory(revision=2, length=0, tables=(), size=256):
    mem = bytearray(size)
    rsdp = _sdt_bytes(b"\0\0\0\0", length, revision) + struct.pack("<IQB3s", 0, XSDT, 0, b"\0\0\0")
    mem[0:len(rsdp)] = rsdp
    for offset, signature in tables:
        mem[offset:offset + SDT.SIZE] = _sdt_bytes(signature)
    return bytes(mem)


def test_checksum_values():
    assert checksum(b"") is True
    assert checksum(bytes([1, 255])) is True
    assert checksum(b"APIC") is False


def test_sdt_parse_fields():
    data = b"xx" + _sdt_bytes(GOOD_SIG, length=40, revision=5)
    sdt = SDT.parse(data, 2)
    assert sdt.signature == GOOD_SIG
    assert sdt.length == 40
    assert sdt.revision == 5
    assert sdt.oem_id == b"OEMID\0"
    assert (sdt.oem_rev, sdt.creator_id, sdt.creator_revision) == (1, 2, 3)


def test_rsdp_parse_reads_xsdt():
    rsdp = RSDP.parse(_memory())
    assert rsdp.xsdt_address == XSDT
    assert rsdp.revision == 2
    assert RSDP.SIZE > SDT.SIZE


def test_parse_truncated_raises():
    with pytest.raises(AcpiError):
        SDT.parse(b"\0" * 10)


def test_old_revision_rejected():
    with pytest.raises(AcpiError):
        ACPIManager(_memory(revision=1))


def test_missing_memory_rejected():
    with pytest.raises(AcpiError):
        ACPIManager(None)


def test_find_returns_offset():
    offset = XSDT + SDT.SIZE
    manager = ACPIManager(_memory(tables=[(offset, GOOD_SIG)]))
    assert manager.find(GOOD_SIG) == offset
    assert manager[GOOD_SIG.decode("latin-1")] == offset


def test_find_later_entry():
    offset = XSDT + SDT.SIZE + 8
    manager = ACPIManager(_memory(tables=[(offset, GOOD_SIG)]))
    assert manager.find(GOOD_SIG) == offset


def test_find_not_found():
    manager = ACPIManager(_memory())
    with pytest.raises(AcpiError) as info:
        manager.find(GOOD_SIG)
    assert info.value.code == -1


def test_find_null_and_empty_signature():
    manager = ACPIManager(_memory())
    with pytest.raises(AcpiError) as none_info:
        manager.find(None)
    assert none_info.value.code == -2
    with pytest.raises(AcpiError) as empty_info:
        manager.find("")
    assert empty_info.value.code == -3


def test_find_bad_signature_checksum():
    manager = ACPIManager(_memory(tables=[(XSDT + SDT.SIZE, b"APIC")]))
    with pytest.raises(AcpiError) as info:
        manager.find("APIC")
    assert info.value.code is None


def test_find_past_end_of_memory():
    manager = ACPIManager(_memory(size=RSDP.SIZE + 16))
    with pytest.raises(AcpiError):
        manager.find(GOOD_SIG)


def test_address_space_values():
    assert AddressSpace(0) is AddressSpace.SYSTEM_MEMORY
    assert AddressSpace(0xFF) is AddressSpace.INVALID
    assert AddressSpace.PCI < AddressSpace.SM_BUS