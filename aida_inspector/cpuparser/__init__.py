# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

from aida_inspector.cpuparser.platformbase import CpuInformation, CpuidQuery, cpuid_result
from aida_inspector.cpuparser.cpuids import CpuidRegister, EAX, EBX, ECX, EDX
