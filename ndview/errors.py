# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

#
# error kinds
#
# every validation failure raises a TensorError, which is a ValueError,
# so callers can catch either the specific kind or ValueError broadly.
#


class TensorError(ValueError):
    pass


class BadShapeSpecifier(TensorError):
    pass


class BadData(TensorError):
    pass


class InconsistentNesting(BadData):
    pass


class ShapeSizeMismatch(TensorError):
    pass


class UnbroadcastableShapes(TensorError):
    def __init__(self, a, b, axis=None, a_size=None, b_size=None):
        self.a = tuple(a)
        self.b = tuple(b)
        self.axis = axis
        msg = f"shapes {self.a} and {self.b} cannot be broadcast together"
        if axis is not None:
            msg += f": axis {axis} (from the right) has sizes {a_size} and {b_size}"
        super().__init__(msg)


class InvalidSliceSpecifier(TensorError):
    pass


class InsufficientIndices(TensorError):
    pass


class NonScalarSingleSet(TensorError):
    pass


class IndexOutOfBounds(TensorError, IndexError):
    pass


class MismatchedShapes(TensorError):
    pass


class UnknownDType(TensorError):
    pass
