"""Hypothesis search over sampling and threshold parameters.

A capture's exact polarity, contrast and rotation are unknown, so the
decoder enumerates candidate interpretations and stops at the first one
whose frame validates.  Hypotheses are enumerated in a fixed nesting
order (outermost first):

    preprocessing variant (5)
      inversion (False, True)
        bias (1.00, 0.95, 1.05, 0.90, 1.10)
          threshold mode (percentile, histogram split)
            anchor shift (0, 4, 8, ... < first ring's sector count)

The anchor is expressed in sectors of the first ring and scaled to every
other ring (``anchor * n / n0``), since rings have different sector
counts.  Sampled intensities do not depend on inversion, bias or mode,
so they are computed once per (variant, anchor) and reused.

With ``SearchConfig.workers > 1`` variants run on a thread pool.  The
shared state keeps the lowest variant index that validated, so the
parallel result is identical to the sequential "first wins" result.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

import numpy as np
import structlog

from .frame import DecodedFrame, try_read_frame
from .layout import LAYOUT, Layout
from .sampler import ThresholdMode, intensities_to_bits, sample_ring

logger = structlog.get_logger(__name__)

INVERSIONS = (False, True)
BIASES = (1.00, 0.95, 1.05, 0.90, 1.10)
THRESHOLD_MODES = (ThresholdMode.PERCENTILE, ThresholdMode.HISTOGRAM_SPLIT)
ANCHOR_STEP = 4

ProgressCallback = Callable[[float], None]


class DecodeStatus(Enum):
    DECODED = "decoded"
    EXHAUSTED = "exhausted"  # every hypothesis tried, none validated
    LIMIT_REACHED = "limit_reached"  # hypothesis cap or timeout hit first
    NOT_STARTED = "not_started"  # no usable image


@dataclass(frozen=True)
class DecodeHypothesis:
    """One candidate interpretation of a capture."""

    variant: int
    inverted: bool
    bias: float
    mode: ThresholdMode
    anchor: int

    def as_dict(self) -> dict:
        return {
            "variant": self.variant,
            "inverted": self.inverted,
            "bias": self.bias,
            "mode": self.mode.value,
            "anchor": self.anchor,
        }


@dataclass(frozen=True)
class SearchConfig:
    """Execution limits for a search.

    Attributes:
        workers: Threads to spread variants over (1 = sequential).
        max_hypotheses: Stop after trying this many hypotheses.
        timeout: Stop after this many seconds of wall-clock time.
    """

    workers: int = 1
    max_hypotheses: int | None = None
    timeout: float | None = None


@dataclass(frozen=True)
class SearchOutcome:
    status: DecodeStatus
    frame: DecodedFrame | None = None
    hypothesis: DecodeHypothesis | None = None
    hypotheses_tried: int = 0


def anchors(layout: Layout = LAYOUT) -> range:
    return range(0, layout.sectors[0], ANCHOR_STEP)


def iter_hypotheses(
    variant_count: int,
    layout: Layout = LAYOUT,
    variants: Sequence[int] | None = None,
) -> Iterator[DecodeHypothesis]:
    """Yield hypotheses in search order.

    Args:
        variant_count: Number of preprocessing variants.
        layout: Ring layout (the first ring sets the anchor sweep).
        variants: Restrict to these variant indices (used by workers).
    """
    for variant in variants if variants is not None else range(variant_count):
        for inverted in INVERSIONS:
            for bias in BIASES:
                for mode in THRESHOLD_MODES:
                    for anchor in anchors(layout):
                        yield DecodeHypothesis(variant, inverted, bias, mode, anchor)


def hypothesis_count(variant_count: int, layout: Layout = LAYOUT) -> int:
    return (
        variant_count
        * len(INVERSIONS)
        * len(BIASES)
        * len(THRESHOLD_MODES)
        * len(anchors(layout))
    )


class RingSampler:
    """Samples every ring of the preprocessed surfaces, with caching."""

    def __init__(self, surfaces: Sequence[np.ndarray], layout: Layout = LAYOUT):
        if not surfaces:
            raise ValueError("No surfaces to sample")
        self.surfaces = surfaces
        self.layout = layout
        h, w = surfaces[0].shape
        self.center = (w / 2.0, h / 2.0)
        self.radii = layout.ring_mid_radii(min(h, w))
        self._cache: dict[tuple[int, int], list[np.ndarray]] = {}

    def ring_intensities(self, variant: int, anchor: int) -> list[np.ndarray]:
        key = (variant, anchor)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        first = self.layout.sectors[0]
        gray = self.surfaces[variant]
        rings = [
            sample_ring(gray, self.center, radius, n, anchor * n / first)
            for radius, n in zip(self.radii, self.layout.sectors)
        ]
        self._cache[key] = rings
        return rings

    def bits_for(self, hypothesis: DecodeHypothesis) -> np.ndarray:
        """Linear bitstream of all rings under *hypothesis*, in layout order."""
        rings = self.ring_intensities(hypothesis.variant, hypothesis.anchor)
        return np.concatenate(
            [
                intensities_to_bits(values, hypothesis.mode, hypothesis.bias, hypothesis.inverted)
                for values in rings
            ]
        )


class _SearchState:
    """State shared by search workers.

    Counters and the best result are guarded by one lock; progress
    callbacks are serialized by a second one.
    """

    def __init__(self, config: SearchConfig, progress: ProgressCallback | None):
        self._lock = threading.Lock()
        self._progress_lock = threading.Lock()
        self._config = config
        self._progress = progress
        self._deadline = (
            time.monotonic() + config.timeout if config.timeout is not None else None
        )
        self.tried = 0
        self.limit_hit = False
        self.best: tuple[DecodeHypothesis, DecodedFrame] | None = None

    def reserve(self) -> bool:
        """Count one more hypothesis, or refuse if a limit was reached."""
        with self._lock:
            if self.limit_hit:
                return False
            limit = self._config.max_hypotheses
            if limit is not None and self.tried >= limit:
                self.limit_hit = True
                return False
            if self._deadline is not None and time.monotonic() >= self._deadline:
                self.limit_hit = True
                return False
            self.tried += 1
            return True

    def offer(self, hypothesis: DecodeHypothesis, frame: DecodedFrame) -> None:
        """Record a validated hypothesis; the lowest variant index wins."""
        with self._lock:
            if self.best is None or hypothesis.variant < self.best[0].variant:
                self.best = (hypothesis, frame)

    def superseded(self, variant: int) -> bool:
        """True once an earlier variant (or this one) has validated."""
        with self._lock:
            return self.best is not None and self.best[0].variant <= variant

    def report(self, percent: float) -> None:
        if self._progress is None:
            return
        # Listeners never run under the search lock
        with self._progress_lock:
            try:
                self._progress(percent)
            except Exception as e:
                logger.warning("progress_callback_failed", error=str(e))


class HypothesisSearch:
    """Runs the hypothesis sweep over one set of preprocessed surfaces."""

    def __init__(
        self,
        surfaces: Sequence[np.ndarray],
        layout: Layout = LAYOUT,
        config: SearchConfig | None = None,
        progress: ProgressCallback | None = None,
    ):
        self.sampler = RingSampler(surfaces, layout)
        self.layout = layout
        self.config = config or SearchConfig()
        self.progress = progress
        self.variant_count = len(surfaces)

    def try_hypothesis(self, hypothesis: DecodeHypothesis) -> DecodedFrame | None:
        return try_read_frame(self.sampler.bits_for(hypothesis), self.layout)

    def run(self) -> SearchOutcome:
        state = _SearchState(self.config, self.progress)
        if self.config.workers > 1 and self.variant_count > 1:
            self._run_parallel(state)
        else:
            for variant in range(self.variant_count):
                if not self._search_variant(variant, state):
                    break
        state.report(100.0)

        if state.best is not None:
            hypothesis, frame = state.best
            return SearchOutcome(DecodeStatus.DECODED, frame, hypothesis, state.tried)
        status = DecodeStatus.LIMIT_REACHED if state.limit_hit else DecodeStatus.EXHAUSTED
        return SearchOutcome(status, hypotheses_tried=state.tried)

    def _run_parallel(self, state: _SearchState) -> None:
        workers = min(self.config.workers, self.variant_count)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._search_variant, variant, state)
                for variant in range(self.variant_count)
            ]
            for future in futures:
                future.result()

    def _search_variant(self, variant: int, state: _SearchState) -> bool:
        """Search one variant; returns False when the whole search should stop."""
        if state.superseded(variant):
            return False
        state.report(variant / self.variant_count * 100.0)

        for hypothesis in iter_hypotheses(self.variant_count, self.layout, [variant]):
            if state.superseded(variant):
                return False
            if not state.reserve():
                return False
            frame = self.try_hypothesis(hypothesis)
            if frame is not None:
                state.offer(hypothesis, frame)
                return False
        return True
