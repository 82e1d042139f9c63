# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from dataclasses import dataclass
from typing import Callable, Dict

from .dtype import *
from .view import *

#
# Tensor
#
# A Tensor associates a flat torch buffer with a View. Tensors derived by
# slice() and squeeze() hold the same buffer object as their source, so
# writes through any of them are seen by all. reshape(), transpose(),
# flatten() and as_type() produce fresh buffers.
#


# split index-order values into nested lists by shape
def nest_values(values: Sequence[Any], shape: Sequence[int]) -> Any:
    if len(shape) == 0:
        return values[0]
    if len(shape) == 1:
        return list(values)
    n = math.prod(shape[1:])
    return [nest_values(values[k * n : (k + 1) * n], shape[1:]) for k in range(shape[0])]


@dataclass
class Tensor:
    data: torch.Tensor
    view: View
    dtype: DType
    is_view: bool

    def __init__(
        self,
        data: torch.Tensor,
        v: Union[View, Sequence[int]],
        dtype: Any = None,
        is_view: bool = False,
    ):
        if not isinstance(data, torch.Tensor) or data.ndim != 1:
            raise BadData(f"tensor buffer must be a 1-D torch.Tensor, got {type(data).__name__}")
        dtype = to_dtype(data.dtype) if dtype is None else to_dtype(dtype)
        if data.dtype != dtype.torch_dtype:
            data = data.to(dtype.torch_dtype)
        self.data = data
        self.view = v if isinstance(v, View) else View.contiguous(v)
        self.dtype = dtype
        self.is_view = is_view

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.view.shape

    @property
    def stride(self) -> Tuple[int, ...]:
        return self.view.stride

    @property
    def dstride(self) -> Tuple[int, ...]:
        return self.view.dstride

    @property
    def offset(self) -> Tuple[int, ...]:
        return self.view.offset

    @property
    def initial_offset(self) -> int:
        return self.view.initial_offset

    @property
    def length(self) -> int:
        return self.view.length

    @property
    def ndim(self) -> int:
        return self.view.ndim

    def __len__(self) -> int:
        return 0 if self.ndim == 0 else self.shape[0]

    def __iter__(self) -> Iterator:
        for i in range(len(self)):
            yield self[i]

    #
    # iteration
    #

    def compute_real_index(self, index: Sequence[int]) -> int:
        return self.view.compute_real_index(index)

    def iorder_index_iterator(self, *bounds) -> IndexRange:
        return self.view.iorder_index_iterator(*bounds)

    def iorder_data_iterator(self, *bounds) -> OffsetRange:
        return self.view.iorder_data_iterator(*bounds)

    def iorder_value_iterator(self, *bounds) -> ValueRange:
        return ValueRange(self.data, self.view.iorder_data_iterator(*bounds))

    def dorder_index_iterator(self, *bounds) -> DataOrderIndexRange:
        return self.view.dorder_index_iterator(*bounds)

    def dorder_data_iterator(self, *bounds) -> DataOrderRange:
        return self.view.dorder_data_iterator(*bounds)

    def dorder_value_iterator(self, *bounds) -> ValueRange:
        return ValueRange(self.data, self.view.dorder_data_iterator(*bounds))

    # element values in index order, as a new 1-D torch tensor
    def values_tensor(self) -> torch.Tensor:
        return gather(self.data, self.iorder_data_iterator())

    def values(self) -> List:
        return self.values_tensor().tolist()

    #
    # element access
    #

    def get(self, *indices: int):
        return self.data[self.view.real_index(indices)].item()

    def item(self):
        if self.length != 1:
            raise TensorError(f"item() called on a tensor of shape {self.shape}")
        return self.values()[0]

    def slice(self, *indices: SliceIndex) -> "Tensor":
        if len(indices) == 0 or (len(indices) == 1 and isinstance(indices[0], (list, tuple)) and len(indices[0]) == 0):
            return self
        return Tensor(self.data, self.view.slice(*indices), self.dtype, is_view=True)

    def squeeze(self) -> "Tensor":
        return Tensor(self.data, self.view.squeeze(), self.dtype, is_view=True)

    #
    # write value into the region selected by indices. a full set of int
    # indices writes one element. anything else writes the sliced region,
    # broadcasting value against it. all source values are read before
    # the first write, so value may alias this tensor.
    #
    def set(self, value: Any, *indices: SliceIndex):
        if len(indices) == self.ndim and checks_indices_are_single_index(*indices):
            if not is_numeric(value):
                raise NonScalarSingleSet(f"setting a single element requires a number, got {type(value).__name__}")
            self.data[self.view.real_index(indices)] = buffer_values([value], self.data.dtype)[0]
            return
        target = self.slice(*indices)
        source = upcast_to_tensor(value)
        if not is_assignable(target.shape, source.shape):
            raise UnbroadcastableShapes(target.shape, source.shape)
        values = gather(source.data, source.view.broadcast_data_iterator(target.shape))
        scatter(self.data, target.iorder_data_iterator(), values)

    # translate python subscripts into slice()/get() arguments
    def subscript_args(self, key: Any) -> List[Any]:
        if not isinstance(key, tuple):
            key = (key,)
        if any(k is Ellipsis for k in key):
            i = next(i for i, k in enumerate(key) if k is Ellipsis)
            fill = self.ndim - (len(key) - 1)
            key = (*key[:i], *([None] * max(fill, 0)), *key[i + 1 :])
        args = []
        for k in key:
            if isinstance(k, slice):
                whole = k.start is None and k.stop is None and k.step is None
                args.append(None if whole else [k.start, k.stop, k.step])
            else:
                args.append(k)
        return args

    def __getitem__(self, key: Any):
        args = self.subscript_args(key)
        if len(args) == self.ndim and checks_indices_are_single_index(*args):
            return self.get(*args)
        return self.slice(*args)

    def __setitem__(self, key: Any, value: Any):
        self.set(value, *self.subscript_args(key))

    def nonzero(self) -> List[Tuple[int, ...]]:
        return [index for index, x in zip(self.iorder_index_iterator(), self.values()) if x != 0]

    def copy(self) -> "Tensor":
        return from_values(self.values_tensor(), self.shape, self.dtype)

    #
    # conversion
    #

    def to_nested_array(self) -> Any:
        return nest_values(self.values(), self.shape)

    def tolist(self) -> Any:
        return self.to_nested_array()

    def to_json(self) -> Dict[str, Any]:
        return {"data": self.to_nested_array(), "shape": list(self.shape), "dtype": str(self.dtype)}

    #
    # equality
    #

    # structural: same metadata, dtype and elements (in index order)
    def equals(self, other: Any) -> bool:
        return (
            isinstance(other, Tensor)
            and self.length == other.length
            and self.shape == other.shape
            and self.offset == other.offset
            and self.stride == other.stride
            and self.dstride == other.dstride
            and self.initial_offset == other.initial_offset
            and self.dtype == other.dtype
            and self.values() == other.values()
        )

    def __eq__(self, other: Any) -> bool:
        return self.equals(other)

    # logical: same shape and elements, regardless of layout or dtype
    def content_equals(self, other: Any) -> bool:
        return isinstance(other, Tensor) and self.shape == other.shape and self.values() == other.values()

    def __str__(self) -> str:
        data = self.values_tensor()

        def places():
            nsign = 1 if data.numel() > 0 and bool(torch.any(data < 0)) else 0
            x = 0 if data.numel() == 0 else data.abs().max().item()
            if not math.isfinite(x):
                x = 0
            return nsign + (1 if x < 1 else math.ceil(math.log(x + 1, 10)))

        if data.is_floating_point():
            fmt = f"{{:{5 + places()}.4f}}"
        else:
            fmt = f"{{:{places()}}}"

        rank = self.ndim
        if rank == 0:
            return f"{data[0].item()}"

        def pr(rows: Any, ind: int = 1) -> str:
            if ind == rank:
                items = [fmt.format(x) for x in rows]
                sep = ", "
            else:
                items = [pr(row, ind + 1) for row in rows]
                sep = "," + ("\n" * (rank - ind)) + (" " * ind)
            return "[" + sep.join(items) + "]"

        return pr(self.to_nested_array())

    def __repr__(self) -> str:
        return f"Tensor(shape={self.shape}, dtype={self.dtype}, is_view={self.is_view})"

    #
    # transformations
    #

    def reshape(self, *shape: Any) -> "Tensor":
        return _reshape(self, *shape)

    def flatten(self) -> "Tensor":
        return _flatten(self)

    def transpose(self) -> "Tensor":
        return _transpose(self)

    def as_type(self, dtype: Any) -> "Tensor":
        return _as_type(self, dtype)

    def clip(self, lower: float, upper: float) -> "Tensor":
        return _clip(self, lower, upper)

    def neg(self) -> "Tensor":
        return _neg(self)

    def triu(self, k: int = 0) -> "Tensor":
        return _triu(self, k)

    def tril(self, k: int = 0) -> "Tensor":
        return _tril(self, k)

    #
    # functional
    #

    def map(self, f: Callable, dtype: Any = None) -> "Tensor":
        return _map(self, f, dtype)

    def reduce(self, f: Callable, initial: Any = None, axis: Optional[int] = None, dtype: Any = None):
        return _reduce(self, f, initial, axis, dtype)

    def accum_map(self, f: Callable, axis: Optional[int] = None, start: Any = None, dtype: Any = None):
        return _accum_map(self, f, axis, start, dtype)

    def apply_to_axis(self, f: Callable, axis: Optional[int] = None, dtype: Any = None):
        return _apply_to_axis(self, f, axis, dtype)

    def map_old_indices_to_new(self, axis: int):
        return _map_old_indices_to_new(self, axis)

    def sum(self, axis: Optional[int] = None):
        return _sum(self, axis)

    def max(self, axis: Optional[int] = None):
        return _max(self, axis)

    def min(self, axis: Optional[int] = None):
        return _min(self, axis)

    def argmax(self, axis: Optional[int] = None):
        return _argmax(self, axis)

    def argmin(self, axis: Optional[int] = None):
        return _argmin(self, axis)

    def all(self, axis: Optional[int] = None):
        return _all(self, axis)

    def any(self, axis: Optional[int] = None):
        return _any(self, axis)

    def mean(self, axis: Optional[int] = None):
        return _mean(self, axis)

    def variance(self, axis: Optional[int] = None):
        return _variance(self, axis)

    def stdev(self, axis: Optional[int] = None):
        return _stdev(self, axis)

    def cumsum(self, axis: Optional[int] = None) -> "Tensor":
        return _cumsum(self, axis)

    def cumprod(self, axis: Optional[int] = None) -> "Tensor":
        return _cumprod(self, axis)

    #
    # elementwise and products
    #

    def add(self, b: Any) -> "Tensor":
        return _add(self, b)

    def sub(self, b: Any) -> "Tensor":
        return _sub(self, b)

    def mult(self, b: Any) -> "Tensor":
        return _mult(self, b)

    def div(self, b: Any) -> "Tensor":
        return _div(self, b)

    def power(self, b: Any) -> "Tensor":
        return _power(self, b)

    def cdiv(self, b: Any) -> "Tensor":
        return _cdiv(self, b)

    def fdiv(self, b: Any) -> "Tensor":
        return _fdiv(self, b)

    def mod(self, b: Any) -> "Tensor":
        return _mod(self, b)

    def lt(self, b: Any) -> "Tensor":
        return _lt(self, b)

    def gt(self, b: Any) -> "Tensor":
        return _gt(self, b)

    def le(self, b: Any) -> "Tensor":
        return _le(self, b)

    def ge(self, b: Any) -> "Tensor":
        return _ge(self, b)

    def ne(self, b: Any) -> "Tensor":
        return _ne(self, b)

    def eq(self, b: Any) -> "Tensor":
        return _eq(self, b)

    def is_close(self, b: Any, rtol: float = 1e-5, atol: float = 1e-8) -> "Tensor":
        return is_close(self, b, rtol, atol)

    def dot(self, b: Any):
        return dot(self, b)

    def matmul(self, b: Any) -> "Tensor":
        return broadcast_matmul(self, b)

    def __add__(self, b):
        return _add(self, b)

    def __radd__(self, a):
        return _add(a, self)

    def __sub__(self, b):
        return _sub(self, b)

    def __rsub__(self, a):
        return _sub(a, self)

    def __mul__(self, b):
        return _mult(self, b)

    def __rmul__(self, a):
        return _mult(a, self)

    def __truediv__(self, b):
        return _div(self, b)

    def __rtruediv__(self, a):
        return _div(a, self)

    def __mod__(self, b):
        return _mod(self, b)

    def __pow__(self, b):
        return _power(self, b)

    def __matmul__(self, b):
        return broadcast_matmul(self, b)

    def __neg__(self):
        return _neg(self)


# these modules build on Tensor
from .constructors import from_values
from .transformations import _reshape, _flatten, _transpose, _as_type, _clip, _neg, _triu, _tril
from .functional import _map, _reduce, _accum_map, _apply_to_axis, _map_old_indices_to_new
from .functional import _sum, _max, _min, _argmax, _argmin, _all, _any
from .functional import _mean, _variance, _stdev, _cumsum, _cumprod
from .broadcast import _add, _sub, _mult, _div, _power, _cdiv, _fdiv, _mod
from .broadcast import _lt, _gt, _le, _ge, _ne, _eq
from .broadcast import upcast_to_tensor, is_close, dot, broadcast_matmul
