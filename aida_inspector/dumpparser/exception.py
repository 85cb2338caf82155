# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

class ParseError(Exception):
    def __init__(self, reason=None):
        msg = "Failed to parse AIDA CPUID dump"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)

class InvalidEncoding(ParseError):
    def __init__(self, error):
        super().__init__(f"input is not valid UTF-8 ({error})")
        self.error = error

class DuplicateGroup(ParseError):
    def __init__(self, name, lineno):
        super().__init__(f"group '{name}' appears again at line {lineno}")
        self.name = name
        self.lineno = lineno

class MissingGroup(ParseError):
    def __init__(self, name):
        super().__init__(f"group '{name}' is not present")
        self.name = name
