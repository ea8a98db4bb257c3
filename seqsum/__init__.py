# Copyright 2022 The SeqSum authors. All rights reserved.
# This file is part of SeqSum, which is released under the BSD 3-Clause
# License. For details, see the LICENSE file.

from .kernel import summation, reference_summation
from .backend import SumBackend, DaceSumKernel, get_kernel
from .util import StatusLevel, FailureReason, format_sum
from .verification.verifier import KernelVerifier
from .verification.sampling import SamplingStrategy
