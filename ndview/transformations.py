# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import logging

from .constructors import *

logger = logging.getLogger(__name__)

#
# transformations
#
# each returns a tensor with a fresh buffer laid out column-major.
# values are read from the source in index order.
#


def pointwise_unary(t: Tensor, op: Callable[[torch.Tensor], torch.Tensor]) -> Tensor:
    return from_values(op(t.values_tensor()), t.shape, t.dtype)


def _reshape(t: Tensor, *shape: Any) -> Tensor:
    dims = shape[0] if len(shape) == 1 and not is_int(shape[0]) else shape
    if isinstance(dims, torch.Tensor) and dims.ndim == 1 and not dims.is_floating_point():
        dims = dims.tolist()
    if isinstance(dims, (list, tuple)):
        dims = infer_neg1_dim(dims, t.length)
    new_shape = compute_shape(dims)
    if compute_size(new_shape) != t.length:
        msg = f"cannot reshape tensor of shape {t.shape} (size {t.length}) to {new_shape}"
        raise ShapeSizeMismatch(msg)
    logger.debug("reshape %s -> %s copies %d elements", t.shape, new_shape, t.length)
    return from_values(t.values_tensor(), new_shape, t.dtype)


def _flatten(t: Tensor) -> Tensor:
    return from_values(t.values_tensor(), (t.length,), t.dtype)


# reverse the axes: result[j, i] = t[i, j]
def _transpose(t: Tensor) -> Tensor:
    v = View.contiguous(tuple(reversed(t.shape)))
    positions = [v.compute_real_index(index[::-1]) for index in t.iorder_index_iterator()]
    data = torch.zeros(v.length, dtype=t.dtype.torch_dtype)
    scatter(data, positions, t.values_tensor())
    logger.debug("transpose %s -> %s", t.shape, v.shape)
    return Tensor(data, v, t.dtype)


# copy the whole buffer into a new dtype, keeping the view metadata
def _as_type(t: Tensor, dtype: Any) -> Tensor:
    dtype = to_dtype(dtype)
    logger.debug("as_type %s -> %s copies a buffer of %d", t.dtype, dtype, t.data.numel())
    return Tensor(t.data.to(dtype.torch_dtype, copy=True), t.view, dtype, is_view=t.is_view)


def _clip(t: Tensor, lower: float, upper: float) -> Tensor:
    return pointwise_unary(t, lambda x: x.clamp(lower, upper))


def _neg(t: Tensor) -> Tensor:
    return pointwise_unary(t, lambda x: -x)


#
# triangles over the last two axes, with diagonal k as in torch.triu:
# k = 0 is the main diagonal, k > 0 above it, k < 0 below.
#
def triangle(t: Tensor, keep: Callable[[int, int], bool]) -> Tensor:
    if t.ndim < 2:
        raise BadShapeSpecifier(f"triangle extraction needs rank >= 2, got shape {t.shape}")
    values = [x if keep(index[-2], index[-1]) else 0 for index, x in zip(t.iorder_index_iterator(), t.values())]
    return from_iterable(values, t.shape, t.dtype)


def _triu(t: Tensor, k: int = 0) -> Tensor:
    return triangle(t, lambda i, j: j - i >= k)


def _tril(t: Tensor, k: int = 0) -> Tensor:
    return triangle(t, lambda i, j: j - i <= k)
