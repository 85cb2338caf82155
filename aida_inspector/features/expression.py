# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

"""Boolean expressions over CPUID and MSR bits.

An expression is an immutable tree evaluated against any CpuInformation. The
result is tri-state: True, False, or None when the data source does not know
enough to decide.

The two kinds of leaves treat missing data differently:

- A CPUID leaf that the data source does not report evaluates to False, the
  same way hardware reports unsupported leaves as all zeros.
- An MSR that the data source does not report evaluates to None, since a
  missing MSR value says nothing about the feature.

And and Or always evaluate both operands and are None as soon as either operand
is None, even when the other operand alone would decide the result."""

from collections import namedtuple

from aida_inspector.cpuparser.platformbase import CpuidQuery
from aida_inspector.cpuparser.cpuids import CpuidRegister
from aida_inspector.inspectorlib.bitfields import is_bit_set, check_bit_index

class BoolExpression(object):
    __slots__ = ()

    def evaluate(self, cpu_info):
        raise NotImplementedError

    # Two nodes of different kinds never compare equal, even with equal operands.
    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__,) + tuple(self))

def check_operand(operand):
    if not isinstance(operand, BoolExpression):
        raise TypeError(f"Operand must be a BoolExpression: {type(operand)}")

class CpuidBitSet(BoolExpression, namedtuple("CpuidBitSet", ["query", "register", "bit"])):
    __slots__ = ()

    def __new__(cls, query, register, bit):
        if isinstance(query, int):
            query = CpuidQuery.from_leaf(query)
        return super().__new__(cls, query, register, bit)

    def __init__(self, *args, **kwargs):
        if not isinstance(self.query, CpuidQuery):
            raise TypeError(f"query must be a CpuidQuery: {type(self.query)}")
        if not isinstance(self.register, CpuidRegister):
            raise TypeError(f"register must be a CpuidRegister: {type(self.register)}")
        check_bit_index(self.bit, 32)

    def evaluate(self, cpu_info):
        regs = cpu_info.cpuid(self.query)
        if regs is None:
            return False
        return is_bit_set(regs.get(self.register), self.bit)

    def __repr__(self):
        return f"CpuidBitSet(leaf={self.query.leaf:#x}, subleaf={self.query.subleaf:#x}, {self.register.name}[{self.bit}])"

class MsrBitSet(BoolExpression, namedtuple("MsrBitSet", ["index", "bit"])):
    __slots__ = ()

    def __init__(self, *args, **kwargs):
        if not isinstance(self.index, int) or not (0 <= self.index <= 0xffffffff):
            raise ValueError(f"Invalid MSR index (0 ~ 0xffffffff): {self.index!r}")
        check_bit_index(self.bit, 64)

    def evaluate(self, cpu_info):
        value = cpu_info.rdmsr(self.index)
        if value is None:
            return None
        return is_bit_set(value, self.bit)

    def __repr__(self):
        return f"MsrBitSet({self.index:#x}[{self.bit}])"

class And(BoolExpression, namedtuple("And", ["left", "right"])):
    __slots__ = ()

    def __init__(self, *args, **kwargs):
        check_operand(self.left)
        check_operand(self.right)

    def evaluate(self, cpu_info):
        left = self.left.evaluate(cpu_info)
        right = self.right.evaluate(cpu_info)
        if left is None or right is None:
            return None
        return left and right

class Or(BoolExpression, namedtuple("Or", ["left", "right"])):
    __slots__ = ()

    def __init__(self, *args, **kwargs):
        check_operand(self.left)
        check_operand(self.right)

    def evaluate(self, cpu_info):
        left = self.left.evaluate(cpu_info)
        right = self.right.evaluate(cpu_info)
        if left is None or right is None:
            return None
        return left or right

class Not(BoolExpression, namedtuple("Not", ["operand"])):
    __slots__ = ()

    def __init__(self, *args, **kwargs):
        check_operand(self.operand)

    def evaluate(self, cpu_info):
        value = self.operand.evaluate(cpu_info)
        if value is None:
            return None
        return not value

class Feature(namedtuple("Feature", ["name", "expr"])):
    """A named capability and the expression that detects it."""

    __slots__ = ()

    def __init__(self, *args, **kwargs):
        check_operand(self.expr)

    def is_present(self, cpu_info):
        return self.expr.evaluate(cpu_info)

def evaluate_features(features, cpu_info):
    """Evaluate (name, expression) pairs in order. Return a list of (name, result) pairs."""
    return [(name, expr.evaluate(cpu_info)) for name, expr in features]
