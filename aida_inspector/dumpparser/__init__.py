# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

from aida_inspector.dumpparser.aida import AidaCpuidDump, parse_dump, CPUID_GROUP, MSR_GROUP
from aida_inspector.dumpparser.exception import ParseError, InvalidEncoding, DuplicateGroup, MissingGroup
