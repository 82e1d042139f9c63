# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from dataclasses import dataclass

from .iteration import *

#
# View
#
# A View says how a multidimensional tensor's elements are found in a
# flat buffer: its shape, the stride of each axis, and the buffer
# position of index (0, ..., 0). dstride keeps the strides of the
# buffer's own layout and offset the accumulated per-axis slice starts.
# Views are immutable; slicing and squeezing produce new Views over the
# same positions.
#


@dataclass(frozen=True)
class View:
    shape: Tuple[int, ...]
    stride: Tuple[int, ...]
    dstride: Tuple[int, ...]
    offset: Tuple[int, ...]
    initial_offset: int = 0

    def __post_init__(self):
        n = len(self.shape)
        if not (len(self.stride) == len(self.dstride) == len(self.offset) == n):
            msg = f"view metadata ranks disagree: shape {self.shape}, stride {self.stride}, "
            msg += f"dstride {self.dstride}, offset {self.offset}"
            raise ValueError(msg)

    @staticmethod
    def contiguous(shape: Sequence[int]) -> "View":
        shape = tuple(shape)
        stride = stride_from_shape(shape)
        return View(shape, stride, stride, (0,) * len(shape), 0)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def length(self) -> int:
        return math.prod(self.shape)

    def compute_real_index(self, index: Sequence[int]) -> int:
        return index_in_data(index, self.stride, self.initial_offset)

    #
    # iteration bounds: with no arguments the whole view. a single
    # argument is taken as the upper bound.
    #
    def bounds(
        self,
        lower_or_upper: Optional[Sequence[int]] = None,
        upper: Optional[Sequence[int]] = None,
        steps: Optional[Sequence[int]] = None,
    ) -> Bounds:
        if lower_or_upper is None:
            lower, upper = (0,) * self.ndim, self.shape
        elif upper is None:
            lower, upper = (0,) * self.ndim, lower_or_upper
        else:
            lower = lower_or_upper
        if steps is None:
            steps = (1,) * self.ndim
        return tuple(lower), tuple(upper), tuple(steps)

    def iorder_index_iterator(self, *args) -> IndexRange:
        return IndexRange(*self.bounds(*args))

    def iorder_data_iterator(self, *args) -> OffsetRange:
        return OffsetRange(*self.bounds(*args), self.stride, self.initial_offset)

    def dorder_data_iterator(self, *args) -> DataOrderRange:
        return DataOrderRange(*self.bounds(*args), self.stride, self.initial_offset)

    def dorder_index_iterator(self, *args) -> DataOrderIndexRange:
        return DataOrderIndexRange(*self.bounds(*args), self.stride)

    # index-order positions of this view replayed over a broadcast shape
    def broadcast_data_iterator(self, target: Sequence[int]) -> OffsetRange:
        target = tuple(target)
        n = len(target)
        stride = broadcast_strides(self.shape, self.stride, target)
        return OffsetRange((0,) * n, target, (1,) * n, stride, self.initial_offset)

    #
    # resolve a full index to a buffer position, for get() and
    # single-element set()
    #
    def real_index(self, indices: Sequence[Any]) -> int:
        if len(indices) != self.ndim:
            msg = f"expected {self.ndim} indices for a view of shape {self.shape}, got {len(indices)}"
            raise InsufficientIndices(msg)
        indices = convert_negative_indices(indices, self.shape)
        for axis, (i, width) in enumerate(zip(indices, self.shape)):
            if not is_int(i):
                raise InvalidSliceSpecifier(f"index at axis {axis} must be an int, got {i!r}")
            if i < 0 or i >= width:
                raise IndexOutOfBounds(f"index {i} out of range for axis {axis} with size {width}")
        return self.compute_real_index(indices)

    # [start, stop] or [start, stop, step] -> clamped (start, stop, step)
    def range_bounds(self, index: RangeIndex, axis: int) -> Tuple[int, int, int]:
        width = self.shape[axis]
        start, stop = index[0], index[1]
        step = index[2] if len(index) == 3 else None
        for x in (start, stop, step):
            if x is not None and not is_int(x):
                msg = f"range at axis {axis} must hold ints or None, got {list(index)!r}"
                raise InvalidSliceSpecifier(msg)
        step = 1 if step is None else step
        if step <= 0:
            raise InvalidSliceSpecifier(f"step at axis {axis} must be positive, got {step}")
        start = 0 if start is None else min(max(start, 0), width)
        stop = width if stop is None else min(max(stop, 0), width)
        return start, stop, step

    #
    # per axis: None keeps the axis, an int pins it and drops it from
    # the result, a range restricts it. trailing axes not mentioned are
    # kept whole.
    #
    def slice(self, *indices: SliceIndex) -> "View":
        n = self.ndim
        if len(indices) > n:
            raise InvalidSliceSpecifier(f"too many indices ({len(indices)}) for a view of rank {n}")
        indices = convert_negative_indices(indices, self.shape)
        start, stop, steps = [0] * n, list(self.shape), [1] * n
        drop = set()
        for axis, index in enumerate(indices):
            if index is None:
                continue
            if is_int(index):
                if index < 0 or index >= self.shape[axis]:
                    width = self.shape[axis]
                    raise IndexOutOfBounds(f"index {index} out of range for axis {axis} with size {width}")
                start[axis], stop[axis] = index, index + 1
                drop.add(axis)
            elif is_range_index(index):
                start[axis], stop[axis], steps[axis] = self.range_bounds(index, axis)
            else:
                msg = f"index at axis {axis} must be None, an int or a 2- or 3-element range, got {index!r}"
                raise InvalidSliceSpecifier(msg)

        shape = new_shape_from_slice(start, stop, steps)
        stride = tuple(step * s for step, s in zip(steps, self.stride))
        offset = tuple(b + o for b, o in zip(start, self.offset))
        initial_offset = self.initial_offset + sum(b * s for b, s in zip(start, self.stride))

        keep = [i for i in range(n) if i not in drop]
        pick = lambda xs: tuple(xs[i] for i in keep)
        return View(pick(shape), pick(stride), pick(self.dstride), pick(offset), initial_offset)

    # drop every axis of extent 1
    def squeeze(self) -> "View":
        keep = [i for i, d in enumerate(self.shape) if d != 1]
        pick = lambda xs: tuple(xs[i] for i in keep)
        return View(pick(self.shape), pick(self.stride), pick(self.dstride), pick(self.offset), self.initial_offset)
