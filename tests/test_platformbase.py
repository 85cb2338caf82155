"""Tests for the CPUID/MSR data model and the derived CpuInformation helpers."""

import struct

import pytest

from aida_inspector.cpuparser import CpuidQuery, cpuid_result, CpuidRegister, CpuInformation
from aida_inspector.cpuparser.cpuids import LEAF_1, LEAF_7
from aida_inspector.cpuparser.msr import MSR_IA32_FEATURE_CONTROL, MSR_IA32_VMX_PROCBASED_CTLS2
from aida_inspector.inspectorlib.bitfields import getbits, is_bit_set, check_bit_index

GENUINE_INTEL = cpuid_result(0x16, 0x756E6547, 0x6C65746E, 0x49656E69)


def brand_leaves(brand):
    """Split a brand string into the cpuid_results of leaves 0x8000_0002 ~ 0x8000_0004."""
    dwords = struct.unpack("<12I", brand.ljust(48, b"\x00"))
    return {
        CpuidQuery(0x80000002): cpuid_result(*dwords[0:4]),
        CpuidQuery(0x80000003): cpuid_result(*dwords[4:8]),
        CpuidQuery(0x80000004): cpuid_result(*dwords[8:12]),
    }


class TestCpuidQuery:
    """Test CpuidQuery construction and ordering."""

    def test_leaf_only(self):
        assert CpuidQuery(7) == CpuidQuery(7, 0)
        assert CpuidQuery.from_leaf(7) == CpuidQuery(leaf=7, subleaf=0)

    def test_ordering(self):
        queries = [CpuidQuery(4, 1), CpuidQuery(0x80000000), CpuidQuery(4, 0), CpuidQuery(1)]
        assert sorted(queries) == [CpuidQuery(1), CpuidQuery(4, 0), CpuidQuery(4, 1), CpuidQuery(0x80000000)]

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            CpuidQuery(0x100000000)
        with pytest.raises(ValueError):
            CpuidQuery(0, -1)

    def test_immutable(self):
        with pytest.raises(AttributeError):
            CpuidQuery(1).leaf = 2


class TestCpuidResult:
    """Test register selection on CPUID results."""

    def test_get(self):
        r = cpuid_result(1, 2, 3, 4)
        assert r.get(CpuidRegister.EAX) == 1
        assert r.get(CpuidRegister.EBX) == 2
        assert r.get(CpuidRegister.ECX) == 3
        assert r.get(CpuidRegister.EDX) == 4

    def test_exactly_four_registers(self):
        assert [r.name for r in CpuidRegister] == ["EAX", "EBX", "ECX", "EDX"]

    def test_repr(self):
        assert repr(cpuid_result(0x16, 0, 0, 0)) == \
            "cpuid_result(eax=0x00000016, ebx=0x00000000, ecx=0x00000000, edx=0x00000000)"


class TestBitfields:
    """Test bit extraction helpers."""

    def test_getbits(self):
        assert getbits(0b1011_0000, 7, 4) == 0b1011
        assert getbits(0x8000000000000000, 63) == 1

    def test_is_bit_set(self):
        assert is_bit_set(0x10, 4) is True
        assert is_bit_set(0x10, 3) is False

    def test_check_bit_index(self):
        assert check_bit_index(31, 32) == 31
        with pytest.raises(ValueError):
            check_bit_index(32, 32)
        with pytest.raises(ValueError):
            check_bit_index(-1, 64)


class TestDerivedHelpers:
    """Test the helpers every CpuInformation derives from cpuid() and rdmsr()."""

    def test_interface_is_abstract(self):
        with pytest.raises(NotImplementedError):
            CpuInformation().cpuid(CpuidQuery(0))
        with pytest.raises(NotImplementedError):
            CpuInformation().rdmsr(0x3a)

    def test_max_leaves_unknown(self, make_cpu_info):
        info = make_cpu_info()
        assert info.max_standard_leaf() == 0
        assert info.max_extended_leaf() == 0x80000000

    def test_max_leaves_known(self, make_cpu_info):
        info = make_cpu_info({
            CpuidQuery(0): GENUINE_INTEL,
            CpuidQuery(0x80000000): cpuid_result(0x80000008, 0, 0, 0),
        })
        assert info.max_standard_leaf() == 0x16
        assert info.max_extended_leaf() == 0x80000008

    def test_vendor(self, make_cpu_info):
        info = make_cpu_info({CpuidQuery(0): GENUINE_INTEL})
        assert info.vendor_bytes() == b"GenuineIntel"
        assert info.vendor_name() == "GenuineIntel"

    def test_vendor_truncated_at_nul(self, make_cpu_info):
        info = make_cpu_info({CpuidQuery(0): cpuid_result(0, 0x00004241, 0x44434241, 0x44434241)})
        assert info.vendor_bytes() == b"AB"

    def test_vendor_unknown(self, make_cpu_info):
        info = make_cpu_info()
        assert info.vendor_bytes() is None
        assert info.vendor_name() is None

    def test_vendor_lossy_decoding(self, make_cpu_info):
        info = make_cpu_info({CpuidQuery(0): cpuid_result(0, 0x000000ff, 0, 0)})
        assert info.vendor_bytes() == b"\xff"
        assert info.vendor_name() == "\ufffd"

    def test_model(self, make_cpu_info):
        leaves = brand_leaves(b"Intel(R) Core(TM) i9-9900K CPU @ 3.60GHz")
        leaves[CpuidQuery(0x80000000)] = cpuid_result(0x80000008, 0, 0, 0)
        info = make_cpu_info(leaves)
        assert info.model_bytes() == b"Intel(R) Core(TM) i9-9900K CPU @ 3.60GHz"
        assert info.model_name() == "Intel(R) Core(TM) i9-9900K CPU @ 3.60GHz"

    def test_model_needs_extended_leaf_count(self, make_cpu_info):
        leaves = brand_leaves(b"Some CPU")
        info = make_cpu_info(leaves)
        assert info.model_bytes() is None

        leaves[CpuidQuery(0x80000000)] = cpuid_result(0x80000003, 0, 0, 0)
        info = make_cpu_info(leaves)
        assert info.model_name() is None

    def test_model_needs_all_brand_leaves(self, make_cpu_info):
        leaves = brand_leaves(b"Some CPU")
        leaves[CpuidQuery(0x80000000)] = cpuid_result(0x80000004, 0, 0, 0)
        del leaves[CpuidQuery(0x80000003)]
        info = make_cpu_info(leaves)
        assert info.model_bytes() is None


class TestRegisterClasses:
    """Test decoding of known CPUID leaves and MSRs from a CpuInformation."""

    def test_leaf_1(self, make_cpu_info):
        info = make_cpu_info({CpuidQuery(1): cpuid_result(0x000906ED, 0x00100800, 0x7FFAFBBF, 0xBFEBFBFF)})
        leaf_1 = LEAF_1.read(info)
        assert leaf_1.display_family == 6
        assert leaf_1.display_model == 0x9e
        assert leaf_1.stepping == 0xd
        assert leaf_1.avx == 1
        assert leaf_1.mmx == 1
        assert leaf_1.hypervisor == 0

    def test_unknown_leaf(self, make_cpu_info):
        assert LEAF_7.read(make_cpu_info()) is None

    def test_field_metadata(self):
        assert LEAF_7.sha.reg is CpuidRegister.EBX
        assert LEAF_7.sha.lsb == 29

    def test_feature_control(self, make_cpu_info):
        assert MSR_IA32_FEATURE_CONTROL.read(make_cpu_info(msrs={0x3a: 0x1})).disable_vmx is True
        assert MSR_IA32_FEATURE_CONTROL.read(make_cpu_info(msrs={0x3a: 0x5})).disable_vmx is False
        assert MSR_IA32_FEATURE_CONTROL.read(make_cpu_info()) is None

    def test_vmx_allowed_1(self):
        assert MSR_IA32_VMX_PROCBASED_CTLS2.allowed_1_bit("ept") == 33
        assert MSR_IA32_VMX_PROCBASED_CTLS2.allowed_1_bit(14) == 46
        with pytest.raises(ValueError):
            MSR_IA32_VMX_PROCBASED_CTLS2.allowed_1_bit(32)
