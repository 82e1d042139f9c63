# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import itertools
import json

from . import config
from .tensor import *

#
# builders
#
# array() takes data in buffer (column-major) order. from_iterable(),
# from_nested_array() and from_values() take values in logical index
# order and lay them out column-major.
#


def data_length(data: Any) -> int:
    return data.numel() if isinstance(data, torch.Tensor) else len(data)


def is_numeric_array(data: Any) -> bool:
    if isinstance(data, torch.Tensor):
        return not data.is_complex()
    if isinstance(data, (list, tuple)):
        return all(is_numeric(x) for x in data)
    return False


def as_buffer(data: Any, dtype: Any) -> Tuple[torch.Tensor, DType]:
    if isinstance(data, torch.Tensor):
        buf = data.reshape(-1)
        dtype = to_dtype(buf.dtype) if dtype is None else to_dtype(dtype)
        return buf.to(dtype.torch_dtype), dtype
    dtype = to_dtype(dtype)
    return buffer_values(data, dtype.torch_dtype), dtype


def array(data: Any, shape: Optional[ShapeLike] = None, dtype: Any = None, disable_checks: bool = False) -> Tensor:
    checked = not disable_checks or bool(config.ALWAYS_CHECK)
    if checked and not is_numeric_array(data):
        raise BadData(f"array data must be a sequence of numbers or a torch.Tensor, got {type(data).__name__}")
    shape = (data_length(data),) if shape is None else compute_shape(shape)
    if checked:
        if compute_size(shape) != data_length(data):
            raise ShapeSizeMismatch(f"shape {shape} has size {compute_size(shape)}, data has {data_length(data)} elements")
    buf, dtype = as_buffer(data, dtype)
    return Tensor(buf, View.contiguous(shape), dtype)


def filled(value: Any, shape: ShapeLike, dtype: Any = None) -> Tensor:
    shape = compute_shape(shape)
    dtype = to_dtype(dtype)
    data = torch.full((compute_size(shape),), value, dtype=dtype.torch_dtype)
    return Tensor(data, View.contiguous(shape), dtype)


def zeros(shape: ShapeLike, dtype: Any = None) -> Tensor:
    return filled(0, shape, dtype)


def ones(shape: ShapeLike, dtype: Any = None) -> Tensor:
    return filled(1, shape, dtype)


def eye(m: int, dtype: Any = None) -> Tensor:
    t = zeros((m, m), dtype)
    for i in range(m):
        t.set(1, i, i)
    return t


# index-order values (a 1-D torch tensor or a list) into a fresh tensor of shape
def from_values(values: Any, shape: Sequence[int], dtype: Any = None) -> Tensor:
    v = View.contiguous(shape)
    dtype = to_dtype(dtype)
    data = torch.zeros(v.length, dtype=dtype.torch_dtype)
    scatter(data, v.iorder_data_iterator(), values)
    return Tensor(data, v, dtype)


def from_iterable(iterable: Iterable, shape: ShapeLike, dtype: Any = None) -> Tensor:
    shape = compute_shape(shape)
    size = compute_size(shape)
    values = list(itertools.islice(iter(iterable), size))
    if len(values) < size:
        raise ShapeSizeMismatch(f"iterable ran out after {len(values)} values, shape {shape} needs {size}")
    return from_values(values, shape, dtype)


#
# arange(stop), arange(start, stop) or arange(start, stop, step).
# the result is int32 when every argument is an int, float64 otherwise.
#
def arange(
    start_or_stop: float,
    stop: Optional[float] = None,
    step: Optional[float] = None,
    shape: Optional[ShapeLike] = None,
    dtype: Any = None,
) -> Tensor:
    start = 0 if stop is None else start_or_stop
    stop = start_or_stop if stop is None else stop
    step = 1 if step is None else step
    if step == 0:
        raise TensorError("arange step must be nonzero")
    size = max(0, math.ceil((stop - start) / step))
    if shape is None:
        shape = (size,)
    elif compute_size(compute_shape(shape)) != size:
        raise ShapeSizeMismatch(f"arange produces {size} values, shape {shape} needs {compute_size(compute_shape(shape))}")
    if dtype is None:
        dtype = DType.int32 if all(is_int(x) for x in (start, stop, step)) else DType.float64
    return from_iterable((start + k * step for k in range(size)), shape, dtype)


# shape and index-order values of a nested list
def nested_shape(x: Any) -> Tuple[Tuple[int, ...], List]:
    if is_numeric(x):
        return (), [x]
    if isinstance(x, (list, tuple)):
        if len(x) == 0:
            return (0,), []
        parts = [nested_shape(y) for y in x]
        shapes = set(p[0] for p in parts)
        if len(shapes) != 1:
            raise InconsistentNesting(f"sub-arrays must all have the same shape, got {sorted(shapes)}")
        return (len(x), *parts[0][0]), [v for _, vals in parts for v in vals]
    raise BadData(f"expected a number or a nested sequence of numbers, got {x!r}")


def from_nested_array(x: Sequence, dtype: Any = None) -> Tensor:
    if not isinstance(x, (list, tuple)):
        raise BadData(f"expected a nested sequence of numbers, got {type(x).__name__}")
    shape, values = nested_shape(x)
    return from_iterable(values, shape, dtype)


def from_json(obj: Union[str, bytes, Dict[str, Any]]) -> Tensor:
    if isinstance(obj, (str, bytes)):
        obj = json.loads(obj)
    try:
        data, shape, dtype = obj["data"], obj["shape"], obj.get("dtype")
    except (KeyError, TypeError, AttributeError):
        raise BadData("json tensor must be an object with data, shape and dtype fields") from None
    t = from_nested_array(data, dtype)
    shape = compute_shape(shape)
    # nesting cannot express the axes after a leading 0 extent
    if t.length == 0 and compute_size(shape) == 0:
        return zeros(shape, dtype)
    if t.shape != shape:
        raise ShapeSizeMismatch(f"json shape {tuple(shape)} does not match data of shape {t.shape}")
    return t
