# Copyright (c) Facebook, Inc. and its affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.
import logging

from . import config
from .errors import *
from .dtype import *
from .shape import *
from .strides import *
from .iteration import *
from .view import *
from .tensor import *
from .constructors import *
from .transformations import *
from .functional import *
from .broadcast import *

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
if config.LOG_LEVEL.value is not None:
    logger.setLevel(config.LOG_LEVEL.value)
