# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""Report CPU features recorded in AIDA64 CPUID dumps."""

__version__ = "0.1.0"
