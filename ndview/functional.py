# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from functools import reduce as fold
from itertools import accumulate
import operator
import statistics

from .broadcast import _div
from .constructors import *

#
# functional operations
#
# whole-tensor forms (axis=None) work on the values in index order.
# axis forms walk one "lane" per position of the reduced shape: the
# values along `axis` starting from that position.
#


def _map_old_indices_to_new(t: Tensor, axis: int) -> ZipRange:
    axis = wrap_dim(axis, t.ndim)
    reduced = View.contiguous(new_shape_from_axis(t.shape, axis))
    return zip_iterables(t.iorder_data_iterator(*slice_for_axis(t.shape, axis)), reduced.iorder_data_iterator())


def lane_values(data: torch.Tensor, start: int, step: int, n: int) -> List:
    if n == 0:
        return []
    return data[start : start + step * (n - 1) + 1 : step].tolist()


def lanes(t: Tensor, axis: int) -> Iterator[Tuple[int, List]]:
    step, n = t.stride[axis], t.shape[axis]
    for old, new in _map_old_indices_to_new(t, axis):
        yield new, lane_values(t.data, old, step, n)


# apply g to every lane along axis, collecting results into the reduced shape
def reduce_lanes(t: Tensor, axis: int, g: Callable[[List], Any], dtype: DType) -> Tensor:
    result = zeros(new_shape_from_axis(t.shape, axis), dtype)
    offsets, values = [], []
    for new, lane in lanes(t, axis):
        offsets.append(new)
        values.append(g(lane))
    scatter(result.data, offsets, values)
    return result


def result_dtype(t: Tensor, dtype: Any) -> DType:
    return t.dtype if dtype is None else to_dtype(dtype)


# map in data order into a fresh tensor of the same shape
def _map(t: Tensor, f: Callable, dtype: Any = None) -> Tensor:
    dtype = result_dtype(t, dtype)
    v = View.contiguous(t.shape)
    values = [f(x) for x in gather(t.data, t.dorder_data_iterator()).tolist()]
    positions = [v.compute_real_index(index) for index in t.dorder_index_iterator()]
    data = torch.zeros(v.length, dtype=dtype.torch_dtype)
    scatter(data, positions, values)
    return Tensor(data, v, dtype)


def _reduce(t: Tensor, f: Callable, initial: Any = None, axis: Optional[int] = None, dtype: Any = None):
    def reduce_values(values: List):
        if initial is not None:
            return fold(f, values, initial)
        if len(values) == 0:
            raise TensorError(f"reduce of empty values with no initial value, shape {t.shape}")
        return fold(f, values)

    if axis is None:
        return reduce_values(t.values())
    return reduce_lanes(t, wrap_dim(axis, t.ndim), reduce_values, result_dtype(t, dtype))


def accumulate_values(values: List, f: Callable, start: Any) -> List:
    if start is None:
        return list(accumulate(values, f))
    return list(accumulate(values, f, initial=start))[1:]


#
# running accumulation. without an axis the result is flat, of length
# t.length; with one it has t's shape and accumulates along each lane.
#
def _accum_map(t: Tensor, f: Callable, axis: Optional[int] = None, start: Any = None, dtype: Any = None) -> Tensor:
    dtype = result_dtype(t, dtype)
    if axis is None:
        return from_iterable(accumulate_values(t.values(), f, start), (t.length,), dtype)
    axis = wrap_dim(axis, t.ndim)
    result = zeros(t.shape, dtype)
    bounds = slice_for_axis(t.shape, axis)
    step, out_step, n = t.stride[axis], result.stride[axis], t.shape[axis]
    offsets, values = [], []
    for old, new in zip_iterables(t.iorder_data_iterator(*bounds), result.iorder_data_iterator(*bounds)):
        offsets.extend(new + i * out_step for i in range(n))
        values.extend(accumulate_values(lane_values(t.data, old, step, n), f, start))
    scatter(result.data, offsets, values)
    return result


def _apply_to_axis(t: Tensor, f: Callable[[List], Any], axis: Optional[int] = None, dtype: Any = None):
    if axis is None:
        return f(t.values())
    return reduce_lanes(t, wrap_dim(axis, t.ndim), f, result_dtype(t, dtype))


#
# aggregations
#


def first_index_of(pick: Callable) -> Callable[[List], int]:
    return lambda values: pick(range(len(values)), key=values.__getitem__)


def _sum(t: Tensor, axis: Optional[int] = None):
    return _reduce(t, operator.add, 0, axis)


def _max(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, max, axis)


def _min(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, min, axis)


def _argmax(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, first_index_of(max), axis, DType.int32)


def _argmin(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, first_index_of(min), axis, DType.int32)


def _all(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, all, axis, DType.uint8)


def _any(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, any, axis, DType.uint8)


def _mean(t: Tensor, axis: Optional[int] = None):
    if axis is None:
        return _sum(t) / t.length
    axis = wrap_dim(axis, t.ndim)
    return _div(_sum(t, axis), t.shape[axis])


# population variance and standard deviation
def _variance(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, statistics.pvariance, axis, DType.float64)


def _stdev(t: Tensor, axis: Optional[int] = None):
    return _apply_to_axis(t, statistics.pstdev, axis, DType.float64)


def _cumsum(t: Tensor, axis: Optional[int] = None, dtype: Any = None) -> Tensor:
    return _accum_map(t, operator.add, axis, None, dtype)


def _cumprod(t: Tensor, axis: Optional[int] = None, dtype: Any = None) -> Tensor:
    return _accum_map(t, operator.mul, axis, 1, dtype)
