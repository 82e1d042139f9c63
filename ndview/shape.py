# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from functools import reduce
from typing import Any, List, Optional, Sequence, Tuple, Union
import math
import numbers
import operator

import torch

from .errors import *

#
# shape algebra
#
# shapes are plain tuples of non-negative ints, one entry per axis.
# everything here is a pure function of shape metadata; nothing touches
# a buffer.
#

Shape = Tuple[int, ...]
ShapeLike = Union[int, Sequence[int], torch.Tensor]

# per-axis index entry accepted by slice(): None, an int, or a
# [start, stop] / [start, stop, step] range
RangeIndex = Sequence[Optional[int]]
SliceIndex = Union[None, int, RangeIndex]


def is_int(x) -> bool:
    return isinstance(x, numbers.Integral) and not isinstance(x, bool)


def is_numeric(x) -> bool:
    return isinstance(x, numbers.Real)


def is_range_index(x) -> bool:
    return isinstance(x, (list, tuple)) and len(x) in (2, 3)


def wrap_dim(n: int, ndim: int):
    if n < 0:
        n = max(n + ndim, 0)
    if n < 0 or n >= ndim:
        raise ValueError(f"dimension {n} out of range for ndim {ndim}")
    return n


def compute_size(shape: Sequence[int]) -> int:
    if len(shape) == 0:
        raise BadShapeSpecifier("cannot compute the size of a rank-0 shape")
    return reduce(operator.mul, shape)


# normalize a shape argument to a tuple of non-negative ints
def compute_shape(x: ShapeLike) -> Shape:
    if is_int(x):
        dims = [x]
    elif isinstance(x, torch.Tensor):
        if x.ndim != 1 or x.is_floating_point() or x.is_complex() or x.dtype == torch.bool:
            raise BadShapeSpecifier(f"shape tensor must be 1-D integer, got {x.dtype} of rank {x.ndim}")
        dims = x.tolist()
    elif isinstance(x, (list, tuple)):
        dims = list(x)
    else:
        raise BadShapeSpecifier(f"shape must be an int, a sequence of ints or a 1-D integer tensor, got {x!r}")
    if len(dims) == 0:
        return (0,)
    bad = [d for d in dims if not is_int(d) or d < 0]
    if len(bad) > 0:
        raise BadShapeSpecifier(f"shape entries must be non-negative ints, got {bad[0]!r} in {x!r}")
    return tuple(int(d) for d in dims)


# fill in a single -1 entry of a reshape target from the source size
def infer_neg1_dim(dims: Sequence[Any], size: int) -> Tuple[Any, ...]:
    neg1 = [i for i, d in enumerate(dims) if is_int(d) and d == -1]
    if len(neg1) == 0:
        return tuple(dims)
    if len(neg1) > 1:
        raise BadShapeSpecifier(f"only one dimension can be inferred, got {tuple(dims)}")
    i = neg1[0]
    known = math.prod(d for j, d in enumerate(dims) if j != i)
    if known == 0 or size % known != 0:
        raise ShapeSizeMismatch(f"cannot infer -1 in {tuple(dims)} for size {size}")
    return (*dims[:i], size // known, *dims[i + 1 :])


# number of positions start, start + step, ... below stop
def slice_len(start: int, stop: int, step: int) -> int:
    return max(0, -(-(stop - start) // step))


def new_shape_from_slice(start: Sequence[int], stop: Sequence[int], steps: Sequence[int]) -> Shape:
    return tuple(slice_len(b, e, s) for b, e, s in zip(start, stop, steps))


def compute_slice_size(lower: Sequence[int], upper: Sequence[int], steps: Sequence[int]) -> int:
    return reduce(operator.mul, new_shape_from_slice(lower, upper, steps), 1)


# shape left after reducing along axis. reducing a rank-1 shape leaves (1,)
def new_shape_from_axis(shape: Sequence[int], axis: int) -> Shape:
    if len(shape) == 1:
        return (1,)
    axis = wrap_dim(axis, len(shape))
    return (*shape[:axis], *shape[axis + 1 :])


#
# right-aligned broadcast of two shapes. on each axis the extents must
# match, or one of them must be 1. a rank-0 shape broadcasts to anything.
#
def calculate_broadcast_dimensions(a: Sequence[int], b: Sequence[int]) -> Shape:
    a, b = tuple(a), tuple(b)
    if len(a) == 0:
        return b
    if len(b) == 0:
        return a
    n = max(len(a), len(b))
    pa = (1,) * (n - len(a)) + a
    pb = (1,) * (n - len(b)) + b
    dims: List[int] = []
    for i, (x, y) in enumerate(zip(pa, pb)):
        if x == y or y == 1:
            dims.append(x)
        elif x == 1:
            dims.append(y)
        else:
            raise UnbroadcastableShapes(a, b, n - i, x, y)
    return tuple(dims)


#
# true if a value of shape `source` can be written into a view of shape
# `target`: trailing axes must match or be 1 in the source, and any
# extra leading source axes must be 1.
#
def is_assignable(target: Sequence[int], source: Sequence[int]) -> bool:
    target, source = tuple(target), tuple(source)
    lead = len(source) - len(target)
    if lead > 0:
        if any(d != 1 for d in source[:lead]):
            return False
        source = source[lead:]
    return all(s == t or s == 1 for s, t in zip(reversed(source), reversed(target)))


#
# negative index normalization. scalar entries get +shape[i]; in a
# range, both start and stop are corrected. entries of any other form
# are passed through for slice() to validate. returns a new tuple.
#
def convert_negative_indices(indices: Sequence[Any], shape: Sequence[int]) -> Tuple[Any, ...]:
    def fix(i: Any, width: int) -> Any:
        return i + width if is_int(i) and i < 0 else i

    result = []
    for index, width in zip(indices, shape):
        if is_int(index):
            result.append(fix(index, width))
        elif is_range_index(index):
            result.append(type(index)([fix(index[0], width), fix(index[1], width), *index[2:]]))
        else:
            result.append(index)
    return (*result, *indices[len(result) :])


def checks_indices_are_single_index(*indices: Any) -> bool:
    return all(is_int(i) for i in indices)


def index_to_slice(index: Sequence[int]) -> List[List[int]]:
    return [[i, i + 1] for i in index]


# bounds (lower, upper, steps) covering every position with `axis` pinned at 0
def slice_for_axis(shape: Sequence[int], axis: int) -> Tuple[Shape, Shape, Shape]:
    axis = wrap_dim(axis, len(shape))
    upper = tuple(1 if i == axis else d for i, d in enumerate(shape))
    return (0,) * len(shape), upper, (1,) * len(shape)
