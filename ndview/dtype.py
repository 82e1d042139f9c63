# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
from enum import Enum
from typing import Any, Dict, Tuple

import torch

from . import config
from .errors import *

#
# DType - the closed set of element kinds a buffer may hold.
#
# each member carries its torch storage dtype. tags are the member
# values, which is also the form written by to_json().
#


class DType(Enum):
    int8 = "int8"
    uint8 = "uint8"
    int16 = "int16"
    int32 = "int32"
    int64 = "int64"
    float32 = "float32"
    float64 = "float64"

    @property
    def torch_dtype(self) -> torch.dtype:
        return TORCH_DTYPES[self]

    @property
    def itemsize(self) -> int:
        return torch.empty(0, dtype=self.torch_dtype).element_size()

    @property
    def is_floating_point(self) -> bool:
        return self.torch_dtype.is_floating_point

    def __str__(self) -> str:
        return self.value


TORCH_DTYPES: Dict[DType, torch.dtype] = {
    DType.int8: torch.int8,
    DType.uint8: torch.uint8,
    DType.int16: torch.int16,
    DType.int32: torch.int32,
    DType.int64: torch.int64,
    DType.float32: torch.float32,
    DType.float64: torch.float64,
}

FROM_TORCH: Dict[torch.dtype, DType] = {t: d for d, t in TORCH_DTYPES.items()}


def default_dtype() -> DType:
    return to_dtype(config.DEFAULT_DTYPE.value)


#
# normalize a dtype argument: None means the configured default; tags,
# torch dtypes and the python scalar types int/float/bool are accepted.
#
def to_dtype(x: Any = None) -> DType:
    if x is None:
        return to_dtype(config.DEFAULT_DTYPE.value)
    if isinstance(x, DType):
        return x
    if isinstance(x, str):
        try:
            return DType(x)
        except ValueError:
            raise UnknownDType(f"unknown dtype tag {x!r}") from None
    if isinstance(x, torch.dtype):
        if x not in FROM_TORCH:
            raise UnknownDType(f"torch dtype {x} has no ndview equivalent")
        return FROM_TORCH[x]
    if x is bool:
        return DType.uint8
    if x is int:
        return DType.int32
    if x is float:
        return DType.float64
    raise UnknownDType(f"expected a dtype tag, DType or torch.dtype, got {x!r}")


#
# promotion
#
# dtypes are grouped into tiers by width. joining two dtypes from
# different tiers gives the wider one. joining two different dtypes
# from the same tier moves to the next type able to hold both.
# int64 joined with any float, and float32 with int32, land on float64;
# float64 is the top of the lattice, so int64 + float64 loses precision
# for integers above 2**53.
#

TIERS: Tuple[Tuple[DType, ...], ...] = (
    (DType.int8, DType.uint8),
    (DType.int16,),
    (DType.int32, DType.float32),
    (DType.int64, DType.float64),
)

SAME_TIER_JOIN = {0: DType.int16, 2: DType.float64, 3: DType.float64}


def tier_of(d: DType) -> int:
    return next(i for i, tier in enumerate(TIERS) if d in tier)


def build_join_table() -> Dict[Tuple[DType, DType], DType]:
    table = {}
    for a in DType:
        for b in DType:
            ta, tb = tier_of(a), tier_of(b)
            if a == b:
                joined = a
            elif ta == tb:
                joined = SAME_TIER_JOIN[ta]
            else:
                joined = a if ta > tb else b
            table[(a, b)] = joined
    table[(DType.int64, DType.float32)] = DType.float64
    table[(DType.float32, DType.int64)] = DType.float64
    return table


JOIN_TABLE = build_join_table()


def dtype_join(a: Any, b: Any) -> DType:
    return JOIN_TABLE[(to_dtype(a), to_dtype(b))]
