"""Hypervisor vendor signatures as reported by the CPUID instruction."""

from __future__ import annotations

from enum import Enum


class Hypervisor(str, Enum):
    """Known twelve-character hypervisor vendor signatures."""

    QEMU = "TCGTCGTCGTCG"
    KVM = " KVMKVMKVM  "
    VMWARE = "VMwareVMware"
    VIRTUALBOX = "VBoxVBoxVBox"
    XEN = "XenVMMXenVMM"
    MICROSOFT = "Microsoft Hv"
    PARALLELS = " prl hyperv "
    PARALLELS_ALT = " lrpepyh vr "
    BHYVE = "bhyve bhyve "
    QNX = " QNXQVMBSQG "


def identify(signature):
    """Return the Hypervisor for a vendor signature, or None if unknown."""
    if isinstance(signature, (bytes, bytearray, memoryview)):
        signature = bytes(signature).decode("latin-1")
    try:
        return Hypervisor(signature)
    except ValueError:
        return None