import pytest

from mekit.paging import PageAllocator, PageTableEntry


def test_present_is_lowest_bit():
    assert PageTableEntry(present=True).to_int() == 1


def test_exec_disable_is_top_bit():
    assert PageTableEntry(exec_disable=True).to_int() == 1 << 63


def test_round_trip():
    entry = PageTableEntry(
        present=True, rw=True, user=False, cache=True,
        reserved=0x2A, physical_address=(1 << 36) - 1, reserved1=5, exec_disable=True,
    )
    assert PageTableEntry.from_int(entry.to_int()) == entry


def test_from_int_round_trip_all_ones():
    value = (1 << 64) - 1
    assert PageTableEntry.from_int(value).to_int() == value


def test_field_out_of_range():
    with pytest.raises(ValueError):
        PageTableEntry(physical_address=1 << 36)
    with pytest.raises(ValueError):
        PageTableEntry.from_int(1 << 64)


def test_alloc_page_sets_bits():
    allocator = PageAllocator()
    entry = allocator.alloc_page(rw=True, user=False)
    assert entry.present is True
    assert entry.rw is True
    assert entry.user is False


def test_create_page_indices_grow():
    allocator = PageAllocator()
    first = allocator.create_page(True, True)
    second = allocator.create_page(False, True)
    assert second == first + 1
    assert allocator.entries[second].user is True


def test_not_present_entry_reused():
    allocator = PageAllocator()
    allocator.create_page(True, False)
    index = allocator.create_page(True, False)
    allocator.entries[index].present = False
    assert allocator.create_page(False, True) == index
    reused = allocator.entries[index]
    assert (reused.present, reused.rw, reused.user) == (True, False, True)
    assert len(allocator.entries) == 2