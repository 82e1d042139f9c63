# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import logging
import operator

from .constructors import *

logger = logging.getLogger(__name__)

#
# broadcasting
#
# binary operations accept tensors, numbers, nested lists and torch
# tensors on either side. both sides are replayed over the broadcast
# shape in index order, with extent-1 and missing axes pinned to their
# single position.
#

Broadcastable = Union[Tensor, float, int, Sequence, torch.Tensor]


def upcast_to_tensor(value: Broadcastable) -> Tensor:
    if isinstance(value, Tensor):
        return value
    if is_numeric(value):
        return array([value])
    if isinstance(value, torch.Tensor):
        return from_values(value.reshape(-1), tuple(value.shape), to_dtype(value.dtype))
    if isinstance(value, (list, tuple)):
        return from_nested_array(value)
    raise BadData(f"cannot broadcast a value of type {type(value).__name__}")


#
# returns (triples, shape, dtype): triples yields (a value, b value,
# output index) in index order over the broadcast shape; dtype is the
# join of the operand dtypes.
#
def broadcast_by_index(a: Broadcastable, b: Broadcastable) -> Tuple[ZipRange, Shape, DType]:
    a, b = upcast_to_tensor(a), upcast_to_tensor(b)
    shape = calculate_broadcast_dimensions(a.shape, b.shape)
    logger.debug("broadcast %s with %s -> %s", a.shape, b.shape, shape)
    n = len(shape)
    triples = zip_iterables(
        gather(a.data, a.view.broadcast_data_iterator(shape)).tolist(),
        gather(b.data, b.view.broadcast_data_iterator(shape)).tolist(),
        IndexRange((0,) * n, shape, (1,) * n),
    )
    return triples, shape, dtype_join(a.dtype, b.dtype)


def binary_broadcast(a: Broadcastable, b: Broadcastable, f: Callable[[Any, Any], Any], dtype: Any = None) -> Tensor:
    triples, shape, joined = broadcast_by_index(a, b)
    dtype = joined if dtype is None else to_dtype(dtype)
    return from_values([f(x, y) for x, y, _ in triples], shape, dtype)


def _add(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.add)


def _sub(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.sub)


def _mult(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.mul)


def _div(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.truediv, DType.float64)


# domain errors give nan and overflow gives inf, as torch.pow does
def float_pow(x, y) -> float:
    return torch.pow(torch.tensor(x, dtype=torch.float64), y).item()


def _power(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, float_pow, DType.float64)


# integer operands divide exactly, without a round trip through float
def ceil_div(x, y):
    if is_int(x) and is_int(y):
        return -(-x // y)
    return math.ceil(x / y)


def floor_div(x, y):
    if is_int(x) and is_int(y):
        return x // y
    return math.floor(x / y)


def _cdiv(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, ceil_div)


def _fdiv(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, floor_div)


def _mod(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.mod)


def _lt(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.lt, DType.uint8)


def _gt(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.gt, DType.uint8)


def _le(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.le, DType.uint8)


def _ge(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.ge, DType.uint8)


def _ne(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.ne, DType.uint8)


def _eq(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, operator.eq, DType.uint8)


def take_max(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, max)


def take_min(a: Broadcastable, b: Broadcastable) -> Tensor:
    return binary_broadcast(a, b, min)


def is_close(a: Broadcastable, b: Broadcastable, rtol: float = 1e-5, atol: float = 1e-8) -> Tensor:
    return binary_broadcast(a, b, lambda x, y: abs(x - y) <= atol + rtol * abs(y), DType.uint8)


#
# products
#


def dot(a: Broadcastable, b: Broadcastable):
    a, b = upcast_to_tensor(a), upcast_to_tensor(b)
    if a.length != b.length:
        raise MismatchedShapes(f"dot needs equal lengths, got {a.length} and {b.length}")
    return sum(x * y for x, y in zip(a.values(), b.values()))


def matmul_2d(a: Broadcastable, b: Broadcastable) -> Tensor:
    a, b = upcast_to_tensor(a), upcast_to_tensor(b)
    if a.ndim != 2 or b.ndim != 2:
        raise MismatchedShapes(f"matmul_2d needs rank-2 operands, got shapes {a.shape} and {b.shape}")
    if a.shape[1] != b.shape[0]:
        raise MismatchedShapes(f"matmul_2d inner extents differ: {a.shape} @ {b.shape}")
    m, p = a.shape[0], b.shape[1]
    values = (dot(a.slice(i), b.slice(None, j)) for i in range(m) for j in range(p))
    return from_iterable(values, (m, p))


# pin a broadcast batch index to an operand's own batch axes
def batch_index(index: Sequence[int], batch: Sequence[int]) -> Tuple[int, ...]:
    tail = index[len(index) - len(batch) :]
    return tuple(min(i, d - 1) for i, d in zip(tail, batch))


#
# matrix product over the last two axes, broadcasting any leading
# (batch) axes. each batch cell is one matmul_2d.
#
def broadcast_matmul(a: Broadcastable, b: Broadcastable) -> Tensor:
    a, b = upcast_to_tensor(a), upcast_to_tensor(b)
    if a.ndim < 2 or b.ndim < 2:
        raise MismatchedShapes(f"matmul needs operands of rank >= 2, got shapes {a.shape} and {b.shape}")
    if a.shape[-1] != b.shape[-2]:
        raise MismatchedShapes(f"matmul inner extents differ: {a.shape} @ {b.shape}")
    if a.ndim == 2 and b.ndim == 2:
        return matmul_2d(a, b)
    a_batch, b_batch = a.shape[:-2], b.shape[:-2]
    batch = calculate_broadcast_dimensions(a_batch, b_batch)
    result = zeros((*batch, a.shape[-2], b.shape[-1]))
    logger.debug("batched matmul %s @ %s -> %s", a.shape, b.shape, result.shape)
    n = len(batch)
    for index in IndexRange((0,) * n, batch, (1,) * n):
        cell = matmul_2d(a.slice(*batch_index(index, a_batch)), b.slice(*batch_index(index, b_batch)))
        result.set(cell, *index)
    return result
