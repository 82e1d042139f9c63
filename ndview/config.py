# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import logging
import os
from typing import Any, Callable, Optional

#
# Option - a setting read once from the environment at import time.
#
# keys are namespaced as NDVIEW_<KEY>. the raw string is passed through
# `parse`; a parse failure is reported against the key.
#


class Option:
    key: str
    value: Any

    def __init__(self, key: str, default: Any = 0, parse: Callable[[str], Any] = int):
        self.key = f"NDVIEW_{key.upper()}"
        raw = os.getenv(self.key)
        if raw is None:
            self.value = default
            return
        try:
            self.value = parse(raw)
        except ValueError:
            raise ValueError(f"invalid value for {self.key}: {raw!r}") from None

    def __bool__(self) -> bool:
        return bool(self.value)

    def __repr__(self) -> str:
        return f"Option({self.key}={self.value!r})"


def parse_log_level(raw: str) -> Optional[int]:
    raw = raw.strip()
    if raw == "":
        return None
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {raw}")
    return level


# dtype tag used when a constructor is not given one
DEFAULT_DTYPE = Option("DEFAULT_DTYPE", "float64", str.strip)

# run argument validation even on internal fast paths that skip it
ALWAYS_CHECK = Option("ALWAYS_CHECK", 0)

# level for the package logger, None leaves it unset
LOG_LEVEL = Option("LOG_LEVEL", None, parse_log_level)
