# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""Parse AIDA CPUID dumps.

Extract CPUID and MSR information out of the text dumps written by AIDA64's
CPUID tool. Only the CPUID values of logical CPU 0 are interpreted. When an MSR
is listed more than once the last value is kept; the duplicated MSRs in real
dumps are performance counters and not interesting.

A dump is a sequence of groups, each introduced by a header line such as

    ------[ Logical CPU #0 ]------

and containing CPUID and MSR lines such as

    CPUID 00000004: 1C03C163-03C0003F-00003FFF-00000006 [SL 03]
    MSR 000001FC: 0000-0000-0030-1CC3

Any other line is ignored.
"""

import re
import logging
from collections import namedtuple
from types import MappingProxyType

from aida_inspector.cpuparser.platformbase import CpuInformation, CpuidQuery, cpuid_result
from aida_inspector.cpuparser.platformbase import UINT32_MAX, UINT64_MAX
from aida_inspector.dumpparser.exception import InvalidEncoding, DuplicateGroup, MissingGroup

CPUID_GROUP = "Logical CPU #0"
MSR_GROUP = "MSR Registers"

def hex_as_int(value, max_value):
    """Convert a hex string to an integer, ignoring any dashes in it.

    Raise ValueError if no digit is left or the result exceeds max_value."""
    digits = value.replace("-", "")
    result = int(digits, base=16)
    if result > max_value:
        raise ValueError(f"{value} does not fit in {max_value.bit_length()} bits")
    return result

def hex_as_u32(value):
    return hex_as_int(value, UINT32_MAX)

def hex_as_u64(value):
    return hex_as_int(value, UINT64_MAX)

class GroupHeader(namedtuple("GroupHeader", ["name"])):
    """A header line, e.g. `------[ Logical CPU #0 ]------` is the header of group `Logical CPU #0`."""

    PATTERN = re.compile(r"------\[ (?P<name>.+) ]------")

    @classmethod
    def match(cls, line):
        m = cls.PATTERN.fullmatch(line)
        if m is None:
            return None
        return cls(m.group("name"))

class CpuidLine(namedtuple("CpuidLine", ["query", "result"])):
    """A CPUID line. Lines without a `[SL xx]` annotation are for subleaf 0."""

    PATTERN = re.compile(
        r"CPUID (?P<leaf>[0-9a-fA-F]+): "
        r"(?P<eax>[0-9a-fA-F]{8})-(?P<ebx>[0-9a-fA-F]{8})-(?P<ecx>[0-9a-fA-F]{8})-(?P<edx>[0-9a-fA-F]{8})"
        r"(?: \[SL (?P<subleaf>[0-9a-fA-F]{2})\]|.*)")

    @classmethod
    def match(cls, line):
        m = cls.PATTERN.fullmatch(line)
        if m is None:
            return None

        try:
            leaf = hex_as_u32(m.group("leaf"))
        except ValueError as e:
            logging.debug(f"Ignore CPUID line with an invalid leaf: {line!r} ({e})")
            return None

        subleaf = m.group("subleaf")
        return cls(
            query=CpuidQuery(leaf, hex_as_u32(subleaf) if subleaf is not None else 0),
            result=cpuid_result(*(hex_as_u32(m.group(reg)) for reg in ["eax", "ebx", "ecx", "edx"])))

class MsrLine(namedtuple("MsrLine", ["index", "value"])):
    """A MSR line. The value is always 19 characters wide; anything else (e.g. `< FAILED >`) is not a value."""

    PATTERN = re.compile(r"MSR (?P<index>[0-9a-fA-F]+): (?P<value>[-0-9a-fA-F]{19}).*")

    @classmethod
    def match(cls, line):
        m = cls.PATTERN.fullmatch(line)
        if m is None:
            return None

        try:
            return cls(index=hex_as_u32(m.group("index")), value=hex_as_u64(m.group("value")))
        except ValueError as e:
            logging.debug(f"Ignore MSR line with an invalid index or value: {line!r} ({e})")
            return None

line_types = [GroupHeader, CpuidLine, MsrLine]
register_line_prefixes = ("CPUID ", "MSR ")

def classify_line(line):
    """Return the parsed form of a line, or None if the line is of no known type."""
    for line_type in line_types:
        parsed = line_type.match(line)
        if parsed is not None:
            return parsed
    return None

def split_lines(text):
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        yield line

def group_lines(text):
    """Classify each line of text and collect the recognized ones by the group they belong to.

    Lines before the first header belong to the unnamed group "". Raise
    DuplicateGroup if two headers carry the same name."""
    groups = {"": []}
    current = groups[""]

    for lineno, line in enumerate(split_lines(text), start=1):
        parsed = classify_line(line)
        if parsed is None:
            if line.startswith(register_line_prefixes):
                logging.debug(f"Ignore malformed register line {lineno}: {line!r}")
            continue

        if isinstance(parsed, GroupHeader):
            if parsed.name in groups:
                raise DuplicateGroup(parsed.name, lineno)
            current = groups[parsed.name] = []
        else:
            current.append(parsed)

    return groups

def collect(lines, line_type, describe):
    acc = {}
    for line in lines:
        if not isinstance(line, line_type):
            continue
        key, value = line
        if key in acc and acc[key] != value:
            logging.debug(f"{describe(key)} is listed more than once. Keep the last value {value!r}.")
        acc[key] = value
    return acc

class AidaCpuidDump(CpuInformation):
    """CPUID and MSR information recovered from an AIDA CPUID dump.

    Lookups are exact: a CPUID query or MSR that is not in the dump is unknown."""

    def __init__(self, cpuid, msrs):
        self._cpuid = MappingProxyType(dict(sorted(cpuid.items())))
        self._msrs = MappingProxyType(dict(sorted(msrs.items())))

    @property
    def cpuid_values(self):
        return self._cpuid

    @property
    def msr_values(self):
        return self._msrs

    def cpuid(self, query):
        return self._cpuid.get(query)

    def rdmsr(self, index):
        return self._msrs.get(index)

    @classmethod
    def from_str(cls, text):
        groups = group_lines(text)

        for name in groups:
            if name not in ("", CPUID_GROUP, MSR_GROUP):
                logging.debug(f"Discard group '{name}' ({len(groups[name])} register lines).")

        if CPUID_GROUP not in groups:
            raise MissingGroup(CPUID_GROUP)
        if MSR_GROUP not in groups:
            raise MissingGroup(MSR_GROUP)

        cpuid = collect(groups[CPUID_GROUP], CpuidLine, lambda q: f"CPUID leaf {q.leaf:#x} subleaf {q.subleaf:#x}")
        msrs = collect(groups[MSR_GROUP], MsrLine, lambda index: f"MSR {index:#x}")

        logging.info(f"Parsed {len(cpuid)} CPUID leaves of logical CPU 0 and {len(msrs)} MSRs.")
        return cls(cpuid, msrs)

def parse_dump(data):
    """Parse an AIDA CPUID dump given as str or as UTF-8 encoded bytes.

    Raise a ParseError if the dump cannot be interpreted."""
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(e) from e
    return AidaCpuidDump.from_str(data)
