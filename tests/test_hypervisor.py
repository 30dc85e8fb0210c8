import pytest

from mekit.hypervisor import Hypervisor, identify


@pytest.mark.parametrize(
    "signature, expected",
    [
        ("TCGTCGTCGTCG", Hypervisor.QEMU),
        (" KVMKVMKVM  ", Hypervisor.KVM),
        (b"VMwareVMware", Hypervisor.VMWARE),
        (b"Microsoft Hv", Hypervisor.MICROSOFT),
        (" lrpepyh vr ", Hypervisor.PARALLELS_ALT),
    ],
)
def test_identify_known(signature, expected):
    assert identify(signature) is expected


def test_identify_unknown():
    assert identify("GenuineIntel") is None
    assert identify("KVMKVMKVM") is None


def test_every_signature_round_trips():
    for hypervisor in Hypervisor:
        assert len(hypervisor.value) == 12
        assert identify(hypervisor.value) is hypervisor
        assert identify(hypervisor.value.encode("latin-1")) is hypervisor


def test_signatures_identify_distinct_hypervisors():
    found = [identify(h.value) for h in Hypervisor]
    assert len(set(found)) == len(list(Hypervisor))
    assert None not in found