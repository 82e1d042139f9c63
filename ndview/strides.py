# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from .shape import *

#
# stride algebra
#
# buffers are laid out column-major: axis 0 is contiguous, and each
# further axis steps over the product of the extents before it.
# a logical index maps to a buffer position by a dot product with the
# strides, plus the view's initial offset.
#


def stride_from_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    stride: List[int] = []
    s = 1
    for d in shape:
        stride.append(s)
        s *= d
    return tuple(stride)


def index_in_data(index: Sequence[int], stride: Sequence[int], initial_offset: int = 0) -> int:
    return initial_offset + sum(i * s for i, s in zip(index, stride))


#
# strides that replay a view of `shape` over a larger broadcast shape.
# axes where the view has extent 1, or which it lacks, get stride 0, so
# every index along them lands on the view's single position. extra
# leading axes on the view side must have extent 1 and are dropped.
#
def broadcast_strides(
    shape: Sequence[int], stride: Sequence[int], target: Sequence[int]
) -> Tuple[int, ...]:
    lead = len(target) - len(shape)
    if lead < 0:
        shape, stride = shape[-lead:], stride[-lead:]
        lead = 0
    return (0,) * lead + tuple(0 if d == 1 else s for d, s in zip(shape, stride))


#
# axis order for a walk in increasing buffer position: outermost first,
# smallest stride last. ties keep the higher axis outside.
#
def data_order_axes(stride: Sequence[int]) -> Tuple[int, ...]:
    return tuple(sorted(range(len(stride)), key=lambda i: (abs(stride[i]), i), reverse=True))
