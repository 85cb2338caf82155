# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

import sys
from pathlib import Path

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from aida_inspector.cpuparser.platformbase import CpuInformation

SAMPLE_DUMP = """
------[ Versions ]------

Program Version : AIDA64 Extreme v6.60.5900

------[ Logical CPU #0 ]------

allcpu: Package 0 / Core 0 / Thread 0: Valid

CPUID 00000000: 00000016-756E6547-6C65746E-49656E69 [GenuineIntel]
CPUID 00000001: 000906ED-00100800-7FFAFBBF-BFEBFBFF

------[ Logical CPU #1 ]------

allcpu: Package 0 / Core 0 / Thread 1: Valid, Virtual

CPUID 00000004: 1C004121-01C0003F-0000003F-00000000 [SL 00]
CPUID 00000004: 1C004122-01C0003F-0000003F-00000000 [SL 01]

------[ MSR Registers ]------

MSR 00000017: 0004-0000-0000-0000 [PlatID = 1]
MSR 0000001B: 0000-0000-FEE0-0900
MSR 00000300: < FAILED >
"""

class DictCpuInformation(CpuInformation):
    """CpuInformation backed by plain dicts."""

    def __init__(self, cpuid=None, msrs=None):
        self.cpuid_values = dict(cpuid or {})
        self.msr_values = dict(msrs or {})

    def cpuid(self, query):
        return self.cpuid_values.get(query)

    def rdmsr(self, index):
        return self.msr_values.get(index)

@pytest.fixture
def sample_dump():
    return SAMPLE_DUMP

@pytest.fixture
def make_cpu_info():
    return DictCpuInformation
