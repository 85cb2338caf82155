# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

from aida_inspector.cpuparser.platformbase import CpuidQuery
from aida_inspector.cpuparser.cpuids import LEAF_1, LEAF_7, LEAF_12
from aida_inspector.cpuparser.msr import MSR_IA32_VMX_PINBASED_CTLS, MSR_IA32_VMX_PROCBASED_CTLS2
from aida_inspector.features.expression import CpuidBitSet, MsrBitSet, Feature

def cpuid_bit(leaf_type, field_name):
    """Expression testing a single-bit cpuidfield of a CPUID leaf class."""
    field = getattr(leaf_type, field_name)
    assert field.msb == field.lsb, f"{leaf_type.__name__}.{field_name} is not a single bit"
    return CpuidBitSet(CpuidQuery(leaf_type.leaf, leaf_type.subleaf), field.reg, field.lsb)

def vmx_allowed_1(msr_type, field_name):
    """Expression testing whether a VMX control may be set to 1, per its capability reporting MSR."""
    return MsrBitSet(msr_type.addr, msr_type.allowed_1_bit(field_name))

def default_features():
    return [
        Feature("AVX", cpuid_bit(LEAF_1, "avx")),
        Feature("MMX", cpuid_bit(LEAF_1, "mmx")),
        Feature("SHA", cpuid_bit(LEAF_7, "sha")),
        Feature("ENCLV", cpuid_bit(LEAF_12, "enclv")),
        Feature("EPT", vmx_allowed_1(MSR_IA32_VMX_PROCBASED_CTLS2, "ept")),
        Feature("Unrestricted Guest", vmx_allowed_1(MSR_IA32_VMX_PROCBASED_CTLS2, "unrestricted_guest")),
        Feature("VMCS Shadowing", vmx_allowed_1(MSR_IA32_VMX_PROCBASED_CTLS2, "vmcs_shadowing")),
        Feature("APIC-register virtualization", vmx_allowed_1(MSR_IA32_VMX_PROCBASED_CTLS2, "apic_reg_virt")),
        Feature("Virtual-interrupt delivery", vmx_allowed_1(MSR_IA32_VMX_PROCBASED_CTLS2, "vintr_delivery")),
        Feature("VMX preemption timer", vmx_allowed_1(MSR_IA32_VMX_PINBASED_CTLS, "preemption_timer")),
        Feature("Process posted interrupts", vmx_allowed_1(MSR_IA32_VMX_PINBASED_CTLS, "posted_interrupts")),
    ]
