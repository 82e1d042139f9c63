# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from dataclasses import dataclass
from typing import Iterable, Iterator
import numbers

import torch

from .strides import *

#
# iteration engine
#
# all traversals are described by per-axis bounds: lower (inclusive),
# upper (exclusive) and steps. the *Range classes are restartable:
# each __iter__ call hands out a fresh cursor, so one range can be
# walked any number of times, and independently.
#
# index order: the last axis varies fastest.
# data order: increasing buffer position; axes are visited with the
# smallest stride innermost.
#

Bounds = Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[int, ...]]


#
# IndexCursor - odometer over logical indices.
# emits exactly compute_slice_size(lower, upper, steps) tuples; a rank-0
# space emits () once.
#
class IndexCursor:
    def __init__(self, lower: Sequence[int], upper: Sequence[int], steps: Sequence[int]):
        self.lower = tuple(lower)
        self.upper = tuple(upper)
        self.steps = tuple(steps)
        self.current = list(self.lower)
        self.remaining = compute_slice_size(self.lower, self.upper, self.steps)

    def __iter__(self) -> "IndexCursor":
        return self

    def __next__(self) -> Tuple[int, ...]:
        if self.remaining == 0:
            raise StopIteration
        index = tuple(self.current)
        self.remaining -= 1
        if self.remaining > 0:
            self.advance()
        return index

    # carry from the last axis outward
    def advance(self):
        axis = len(self.current) - 1
        while axis >= 0:
            self.current[axis] += self.steps[axis]
            if self.current[axis] < self.upper[axis]:
                return
            self.current[axis] = self.lower[axis]
            axis -= 1


#
# OffsetCursor - buffer positions in index order.
# the outer axes are walked by an IndexCursor; the innermost axis is
# swept by adding a fixed step, so there is one dot product per row
# rather than per element.
#
class OffsetCursor:
    def __init__(
        self,
        lower: Sequence[int],
        upper: Sequence[int],
        steps: Sequence[int],
        stride: Sequence[int],
        initial_offset: int,
    ):
        if len(stride) == 0:
            self.outer = IndexCursor((), (), ())
            self.outer_stride: Tuple[int, ...] = ()
            self.inner_count = 1
            self.inner_step = 0
            self.base = initial_offset
        else:
            self.outer = IndexCursor(lower[:-1], upper[:-1], steps[:-1])
            self.outer_stride = tuple(stride[:-1])
            self.inner_count = slice_len(lower[-1], upper[-1], steps[-1])
            self.inner_step = stride[-1] * steps[-1]
            self.base = initial_offset + lower[-1] * stride[-1]
        if self.inner_count == 0:
            self.outer.remaining = 0
        self.position = 0
        self.left = 0

    def __iter__(self) -> "OffsetCursor":
        return self

    def __next__(self) -> int:
        while self.left == 0:
            outer_index = next(self.outer)
            self.position = index_in_data(outer_index, self.outer_stride, self.base)
            self.left = self.inner_count
        offset = self.position
        self.position += self.inner_step
        self.left -= 1
        return offset


#
# walks permuted bounds and reports indices in the original axis order
#
class PermutedIndexCursor:
    def __init__(self, bounds: Bounds, perm: Sequence[int]):
        lower, upper, steps = bounds
        self.perm = tuple(perm)
        self.cursor = IndexCursor(*(permute(b, self.perm) for b in (lower, upper, steps)))

    def __iter__(self) -> "PermutedIndexCursor":
        return self

    def __next__(self) -> Tuple[int, ...]:
        permuted = next(self.cursor)
        index = [0] * len(self.perm)
        for i, axis in enumerate(self.perm):
            index[axis] = permuted[i]
        return tuple(index)


class ValueCursor:
    def __init__(self, data: torch.Tensor, offsets: Iterator[int]):
        self.data = data
        self.offsets = offsets

    def __iter__(self) -> "ValueCursor":
        return self

    def __next__(self):
        return self.data[next(self.offsets)].item()


def permute(xs: Sequence[int], perm: Sequence[int]) -> Tuple[int, ...]:
    return tuple(xs[i] for i in perm)


#
# restartable ranges
#


@dataclass(frozen=True)
class IndexRange:
    lower: Tuple[int, ...]
    upper: Tuple[int, ...]
    steps: Tuple[int, ...]

    def __iter__(self) -> IndexCursor:
        return IndexCursor(self.lower, self.upper, self.steps)

    def __len__(self) -> int:
        return compute_slice_size(self.lower, self.upper, self.steps)


@dataclass(frozen=True)
class OffsetRange:
    lower: Tuple[int, ...]
    upper: Tuple[int, ...]
    steps: Tuple[int, ...]
    stride: Tuple[int, ...]
    initial_offset: int

    def __iter__(self) -> OffsetCursor:
        return OffsetCursor(self.lower, self.upper, self.steps, self.stride, self.initial_offset)

    def __len__(self) -> int:
        return compute_slice_size(self.lower, self.upper, self.steps)


@dataclass(frozen=True)
class DataOrderRange:
    lower: Tuple[int, ...]
    upper: Tuple[int, ...]
    steps: Tuple[int, ...]
    stride: Tuple[int, ...]
    initial_offset: int

    def __iter__(self) -> OffsetCursor:
        perm = data_order_axes(self.stride)
        return OffsetCursor(
            permute(self.lower, perm),
            permute(self.upper, perm),
            permute(self.steps, perm),
            permute(self.stride, perm),
            self.initial_offset,
        )

    def __len__(self) -> int:
        return compute_slice_size(self.lower, self.upper, self.steps)


# logical indices in the order DataOrderRange visits their positions
@dataclass(frozen=True)
class DataOrderIndexRange:
    lower: Tuple[int, ...]
    upper: Tuple[int, ...]
    steps: Tuple[int, ...]
    stride: Tuple[int, ...]

    def __iter__(self) -> PermutedIndexCursor:
        bounds = (self.lower, self.upper, self.steps)
        return PermutedIndexCursor(bounds, data_order_axes(self.stride))

    def __len__(self) -> int:
        return compute_slice_size(self.lower, self.upper, self.steps)


# element values read lazily at the positions of an offset range
@dataclass(frozen=True, eq=False)
class ValueRange:
    data: torch.Tensor
    offsets: Iterable[int]

    def __iter__(self) -> ValueCursor:
        return ValueCursor(self.data, iter(self.offsets))

    def __len__(self) -> int:
        return len(self.offsets)  # type: ignore


# lockstep walk of several ranges, ending with the shortest
@dataclass(frozen=True, eq=False)
class ZipRange:
    ranges: Tuple[Iterable, ...]

    def __iter__(self) -> Iterator[Tuple]:
        return zip(*(iter(r) for r in self.ranges))

    def __len__(self) -> int:
        return min((len(r) for r in self.ranges), default=0)  # type: ignore


def zip_iterables(*ranges: Iterable) -> ZipRange:
    return ZipRange(tuple(ranges))


#
# bulk element transfer between a buffer and a list of positions
#


def offsets_tensor(offsets: Iterable[int]) -> torch.Tensor:
    return torch.tensor(list(offsets), dtype=torch.long)


def gather(data: torch.Tensor, offsets: Iterable[int]) -> torch.Tensor:
    return data[offsets_tensor(offsets)]


#
# python values as a tensor of dtype. they are built at int64 (all
# integral, integer target) or float64 and then cast, so integers out
# of range wrap.
#
def buffer_values(values: Iterable, dtype: torch.dtype) -> torch.Tensor:
    values = list(values)
    exact = not dtype.is_floating_point and all(isinstance(x, numbers.Integral) for x in values)
    return torch.tensor(values, dtype=torch.int64 if exact else torch.float64).to(dtype)


def scatter(data: torch.Tensor, offsets: Iterable[int], values):
    index = offsets_tensor(offsets)
    if isinstance(values, torch.Tensor):
        values = values.to(data.dtype)
    else:
        values = buffer_values(values, data.dtype)
    data[index] = values
