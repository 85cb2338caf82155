# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""Helper functions to work with bitfields.

Documentation frequently writes bitfields as the inclusive range [msb:lsb];
this module provides functions to work with bitfields using msb and lsb rather
than manually computing shifts and masks from those."""

def bitfield_max(msb, lsb=None):
    """Return the largest value that fits in the bitfield [msb:lsb] (or [msb] if lsb is None)"""
    if lsb is None:
        lsb = msb
    return (1 << (msb - lsb + 1)) - 1

def getbits(value, msb, lsb=None):
    """From the specified value, extract the bitfield [msb:lsb] (or [msb] if lsb is None)"""
    if lsb is None:
        lsb = msb
    return (value >> lsb) & bitfield_max(msb, lsb)

def is_bit_set(value, bit):
    """Return True if and only if bit [bit] of value is 1"""
    return getbits(value, bit) == 1

def check_bit_index(bit, width):
    """Raise ValueError unless bit addresses one of the width bits of a register."""
    if not isinstance(bit, int) or not (0 <= bit < width):
        raise ValueError(f"Bit index {bit!r} is out of range for a {width}-bit register")
    return bit
