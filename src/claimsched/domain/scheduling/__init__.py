"""Decentralised claim scheduling: one race-tolerant attempt per call."""

from __future__ import annotations

from .errors import (
    ERR_GET_CLAIM,
    ERR_LIST_CLASSES,
    ERR_UPDATE_CLAIM,
    ReconcileTimeoutError,
    SchedulingError,
)
from .jitter import Jitterer, RandomJitterer, no_jitter
from .options import SchedulerOptions
from .outcome import Dispatch, Outcome, ReconcileResult
from .reconciler import REASON_CLASS_FOUND, ClaimSchedulingReconciler, controller_name

__all__ = [
    "ERR_GET_CLAIM",
    "ERR_LIST_CLASSES",
    "ERR_UPDATE_CLAIM",
    "REASON_CLASS_FOUND",
    "ClaimSchedulingReconciler",
    "Dispatch",
    "Jitterer",
    "Outcome",
    "RandomJitterer",
    "ReconcileResult",
    "ReconcileTimeoutError",
    "SchedulerOptions",
    "SchedulingError",
    "controller_name",
    "no_jitter",
]
