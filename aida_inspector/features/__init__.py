# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

from aida_inspector.features.expression import BoolExpression, CpuidBitSet, MsrBitSet, And, Or, Not
from aida_inspector.features.expression import Feature, evaluate_features
from aida_inspector.features.catalogue import default_features
