# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

from aida_inspector.cpuparser.platformbase import MSR, msrfield

class MSR_IA32_FEATURE_CONTROL(MSR):
    addr = 0x03a
    lock = msrfield(0, 0, doc="Lock bit")
    vmx_outside_smx = msrfield(2, 2, doc="Enable VMX outside SMX operation")

    @property
    def disable_vmx(self):
        return bool(self.lock and not self.vmx_outside_smx)

class VMXCapabilityReportingMSR(MSR):
    """VMX capability MSRs report allowed 0-settings in bits 31:0 and allowed 1-settings in bits 63:32."""

    @classmethod
    def get_field_idx(cls, field):
        if isinstance(field, int):
            return field
        if isinstance(field, str):
            return getattr(cls, field).lsb
        raise TypeError(f"Invalid field type: {field}, {type(field)}")

    @classmethod
    def allowed_1_bit(cls, field):
        """The bit of this MSR that reports whether the control may be set to 1."""
        field_idx = cls.get_field_idx(field)
        if not (0 <= field_idx < 32):
            raise ValueError(f"VMX control index out of range: {field_idx}")
        return 32 + field_idx

class MSR_IA32_VMX_PINBASED_CTLS(VMXCapabilityReportingMSR):
    addr = 0x00000481

    preemption_timer = msrfield(6, 6, doc="Activate VMX-preemption timer")
    posted_interrupts = msrfield(7, 7, doc="Process posted interrupts")

class MSR_IA32_VMX_PROCBASED_CTLS2(VMXCapabilityReportingMSR):
    addr = 0x0000048B

    ept = msrfield(1, 1, doc="Enable EPT")
    unrestricted_guest = msrfield(7, 7, doc="Unrestricted guest")
    apic_reg_virt = msrfield(8, 8, doc="APIC-register virtualization")
    vintr_delivery = msrfield(9, 9, doc="Virtual-interrupt delivery")
    vmcs_shadowing = msrfield(14, 14, doc="VMCS shadowing")
