# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""CPUID register decoding."""

import enum

from aida_inspector.cpuparser.platformbase import CPUID, cpuidfield

class CpuidRegister(enum.Enum):
    """The output registers of a CPUID invocation, valued by their position in a cpuid_result."""
    EAX = 0
    EBX = 1
    ECX = 2
    EDX = 3

EAX = CpuidRegister.EAX
EBX = CpuidRegister.EBX
ECX = CpuidRegister.ECX
EDX = CpuidRegister.EDX

class LEAF_1(CPUID):
    """Basic CPUID Information

    Contains version type, family, model, and stepping ID and feature information"""

    leaf = 0x1

    stepping = cpuidfield(EAX, 3, 0, doc="Stepping ID")
    model = cpuidfield(EAX, 7, 4, doc="Model")
    family = cpuidfield(EAX, 11, 8, doc="Family ID")
    ext_model = cpuidfield(EAX, 19, 16, doc="Extended Model ID")
    ext_family = cpuidfield(EAX, 27, 20, doc="Extended Family ID")

    avx = cpuidfield(ECX, 28, 28)
    hypervisor = cpuidfield(ECX, 31, 31)

    mmx = cpuidfield(EDX, 23, 23)

    @property
    def display_family(self):
        if self.family == 0xf:
            return self.ext_family + self.family
        return self.family

    @property
    def display_model(self):
        if self.family == 0xf or self.family == 0x6:
            return (self.ext_model << 4) + self.model
        return self.model

class LEAF_7(CPUID):
    """Structured Extended Feature Flags Enumeration Leaf"""

    leaf = 0x7

    sha = cpuidfield(EBX, 29, 29, doc="Supports Intel® Secure Hash Algorithm Extensions (Intel® SHA Extensions) if 1")

class LEAF_12(CPUID):
    """Intel SGX Capability Enumeration Leaf, sub-leaf 0"""

    leaf = 0x12

    enclv = cpuidfield(EAX, 5, 5, doc="ENCLV leaf functions EINCVIRTCHILD, EDECVIRTCHILD and ESETCONTEXT are supported if 1")
