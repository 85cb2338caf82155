# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""CPUID and MSR information read from the running machine.

CPUID values come from the `cpuid` tool and MSR values from the msr driver
(/dev/cpu/<id>/msr). Anything that cannot be read is reported as unknown."""

import re
import logging
import subprocess # nosec

from aida_inspector.cpuparser.platformbase import CpuInformation, CpuidQuery, cpuid_result
from aida_inspector.cpuparser.platformbase import STANDARD_LEAF_BASE, EXTENDED_LEAF_BASE
from aida_inspector.inspectorlib import external_tools

regex_hex = "0x[0-9a-fA-F]+"

def cpuid(cpu_id, leaf, subleaf):
    try:
        result = external_tools.run(["cpuid", "-l", leaf, "-s", subleaf, "-r"], check=True)
        stdout = result.stdout.decode("ascii").replace("\n", "")
    except (subprocess.CalledProcessError, UnicodeDecodeError) as e:
        logging.debug(f"Cannot read CPUID leaf {leaf:#x} subleaf {subleaf:#x} of CPU {cpu_id}: {e}")
        return None

    regex = re.compile(f"CPU {cpu_id}:[^:]*: eax=({regex_hex}) ebx=({regex_hex}) ecx=({regex_hex}) edx=({regex_hex})")
    m = regex.search(stdout)
    if m is None:
        return None
    return cpuid_result(*map(lambda idx: int(m.group(idx), base=16), range(1, 5)))

def rdmsr(cpu_id, addr, msr_dev="/dev/cpu/{cpu_id}/msr"):
    path = msr_dev.format(cpu_id=cpu_id)
    try:
        with open(path, 'rb', buffering=0) as msr_reader:
            msr_reader.seek(addr)
            r = msr_reader.read(8)
    except FileNotFoundError:
        logging.warning(f"Missing CPU MSR file at {path}. Check the value of CONFIG_X86_MSR " \
                        "in the kernel config and make sure the msr module is loaded.")
        return None
    except OSError as e:
        logging.debug(f"Cannot read MSR {addr:#x} of CPU {cpu_id}: {e}")
        return None

    if len(r) != 8:
        logging.debug(f"Short read of MSR {addr:#x} of CPU {cpu_id}: {len(r)} bytes")
        return None
    return int.from_bytes(r, 'little')

class NativeCpuInformation(CpuInformation):
    """CpuInformation of one logical CPU of this machine."""

    def __init__(self, cpu_id=0, msr_dev="/dev/cpu/{cpu_id}/msr"):
        self.cpu_id = cpu_id
        self.msr_dev = msr_dev
        self._cpuid_cache = {}

    def _read_cpuid(self, query):
        if query not in self._cpuid_cache:
            self._cpuid_cache[query] = cpuid(self.cpu_id, query.leaf, query.subleaf)
        return self._cpuid_cache[query]

    def cpuid(self, query):
        # Out-of-range leaves return data of some other leaf on real hardware.
        if query.leaf not in (STANDARD_LEAF_BASE, EXTENDED_LEAF_BASE):
            if query.leaf >= EXTENDED_LEAF_BASE:
                if query.leaf > self.max_extended_leaf():
                    return None
            elif query.leaf > self.max_standard_leaf():
                return None
        return self._read_cpuid(CpuidQuery(*query))

    def rdmsr(self, index):
        return rdmsr(self.cpu_id, index, self.msr_dev)
