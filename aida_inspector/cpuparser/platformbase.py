# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""Base classes and infrastructure for CPUID and MSR decoding"""

import struct
from collections import namedtuple

from aida_inspector.inspectorlib.bitfields import getbits

UINT32_MAX = 0xffffffff
UINT64_MAX = 0xffffffffffffffff

STANDARD_LEAF_BASE = 0x0
EXTENDED_LEAF_BASE = 0x80000000

class CpuidQuery(namedtuple("CpuidQuery", ["leaf", "subleaf"], defaults=[0])):
    """The input to a CPUID invocation. Queries order by leaf, then by subleaf."""

    __slots__ = ()

    @classmethod
    def from_leaf(cls, leaf):
        return cls(leaf, 0)

    def __init__(self, *args, **kwargs):
        if not (0 <= self.leaf <= UINT32_MAX):
            raise ValueError(f"Invalid CPUID leaf (0 ~ 0xffffffff): {self.leaf:#x}")
        if not (0 <= self.subleaf <= UINT32_MAX):
            raise ValueError(f"Invalid CPUID subleaf (0 ~ 0xffffffff): {self.subleaf:#x}")

    def __repr__(self):
        return f"CpuidQuery(leaf={self.leaf:#010x}, subleaf={self.subleaf:#x})"

class cpuid_result(namedtuple('cpuid_result', ['eax', 'ebx', 'ecx', 'edx'])):
    __slots__ = ()

    def get(self, register):
        """Return the value of one output register, selected by a CpuidRegister."""
        return self[register.value]

    def __repr__(self):
        return "cpuid_result(eax={eax:#010x}, ebx={ebx:#010x}, ecx={ecx:#010x}, edx={edx:#010x})".format(**self._asdict())

def dwords_to_bytes(dwords):
    """Lay out 32-bit values as little-endian bytes and cut the result at the first NUL."""
    raw = struct.pack(f"<{len(dwords)}I", *dwords)
    return raw.split(b"\x00", 1)[0]

class CpuInformation(object):
    """A data source that can be queried for CPUID and MSR information.

    Subclasses provide cpuid() and rdmsr(). Both return None when the value is
    unknown to the data source. The remaining methods are derived from those two
    and are shared by every data source."""

    def cpuid(self, query):
        """Return the cpuid_result for a CpuidQuery, or None if it is unknown."""
        raise NotImplementedError

    def rdmsr(self, index):
        """Return the 64-bit value of MSR index, or None if it is unknown."""
        raise NotImplementedError

    def max_standard_leaf(self):
        """The maximum supported standard (0x0000_xxxx) CPUID leaf."""
        r = self.cpuid(CpuidQuery.from_leaf(STANDARD_LEAF_BASE))
        return r.eax if r is not None else 0

    def max_extended_leaf(self):
        """The maximum supported extended (0x8000_xxxx) CPUID leaf.

        Falls back to 0x8000_0000 so that checks for extended leaves see them
        as absent when leaf 0x8000_0000 itself is unknown."""
        r = self.cpuid(CpuidQuery.from_leaf(EXTENDED_LEAF_BASE))
        return r.eax if r is not None else EXTENDED_LEAF_BASE

    def vendor_bytes(self):
        r = self.cpuid(CpuidQuery.from_leaf(STANDARD_LEAF_BASE))
        if r is None:
            return None
        return dwords_to_bytes([r.ebx, r.edx, r.ecx])

    def vendor_name(self):
        b = self.vendor_bytes()
        return b.decode("utf-8", errors="replace") if b is not None else None

    def model_bytes(self):
        """The processor brand string as raw bytes, from leaves 0x8000_0002 ~ 0x8000_0004."""
        if self.max_extended_leaf() < 0x80000004:
            return None

        dwords = []
        for leaf in [0x80000002, 0x80000003, 0x80000004]:
            r = self.cpuid(CpuidQuery.from_leaf(leaf))
            if r is None:
                return None
            dwords.extend(r)
        return dwords_to_bytes(dwords)

    def model_name(self):
        b = self.model_bytes()
        return b.decode("utf-8", errors="replace") if b is not None else None

class CPUID(object):
    # Subclasses must define a "leaf" field as part of the class definition.
    subleaf = 0

    def __init__(self, regs):
        self.regs = regs

    @classmethod
    def read(cls, cpu_info, subleaf=None):
        """Decode this leaf from a CpuInformation, or return None if the leaf is unknown."""
        if subleaf is None:
            subleaf = cls.subleaf
        regs = cpu_info.cpuid(CpuidQuery(cls.leaf, subleaf))
        if regs is None:
            return None
        r = cls(regs)
        r.subleaf = subleaf
        return r

class cpuidfield(property):
    def __init__(self, reg, msb, lsb, doc="Bogus"):
        self.reg = reg
        self.msb = msb
        self.lsb = lsb

        def getter(self):
            return getbits(self.regs.get(reg), msb, lsb)
        super(cpuidfield, self).__init__(getter, doc=doc)

class MSR(object):
    # Subclasses must define a "addr" field as part of the class definition.

    def __init__(self, value=0):
        self.value = value

    @classmethod
    def read(cls, cpu_info):
        """Decode this MSR from a CpuInformation, or return None if its value is unknown."""
        value = cpu_info.rdmsr(cls.addr)
        if value is None:
            return None
        return cls(value)

class msrfield(property):

    def __init__(self, msb, lsb, doc=None):
        self.msb = msb
        self.lsb = lsb

        def getter(self):
            return getbits(self.value, msb, lsb)
        super(msrfield, self).__init__(getter, doc=doc)
