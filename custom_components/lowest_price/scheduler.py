"""Pure planning algorithm for the Lowest Price integration.

This module contains no Home Assistant dependencies and can be tested independently.
Given a batch of price samples and a daily hour window it decides which
intervals are switched on:
- Window segmentation: classify every sample as inside/outside the window,
  or as part of a window the batch only partially covers
- Selection: cheapest contiguous block, or the cheapest individual intervals
- Price cap: drop selections that are too expensive
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum

_LOGGER = logging.getLogger(__name__)

_INTERVALS_PER_HOUR = {15: 4, 30: 2}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class PlanningError(Exception):
    """Base class for errors raised while planning."""


class InvalidConfigError(PlanningError):
    """The plan configuration is out of range."""


class EmptyInputError(PlanningError):
    """No price samples were supplied."""


class UnsortedInputError(PlanningError):
    """Sample start times are not strictly increasing."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class RunState(StrEnum):
    """Classification of a run relative to the daily window."""

    OUTSIDE = "outside"
    INSIDE = "inside"
    START_MISSING = "start_missing"
    END_MISSING = "end_missing"


@dataclass(frozen=True)
class Sample:
    """One price observation."""

    start: datetime
    price: float


@dataclass(frozen=True)
class Run:
    """A contiguous span of samples sharing one state (inclusive indices)."""

    state: RunState
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def _is_hour(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 23


@dataclass(frozen=True)
class Window:
    """Daily clock-hour window covering the hours [from_hour, to_hour).

    from_hour == to_hour is a full 24-hour window starting at from_hour.
    from_hour > to_hour crosses midnight.
    """

    from_hour: int
    to_hour: int

    def __post_init__(self) -> None:
        if not _is_hour(self.from_hour) or not _is_hour(self.to_hour):
            raise InvalidConfigError(
                f"Window hours must be integers 0-23, got {self.from_hour!r}-{self.to_hour!r}"
            )

    @property
    def full_day(self) -> bool:
        return self.from_hour == self.to_hour

    @property
    def last_hour(self) -> int:
        """Hour of day in which the window closes."""
        return (self.to_hour - 1) % 24

    def contains(self, hour: int) -> bool:
        if self.full_day:
            return True
        if self.from_hour < self.to_hour:
            return self.from_hour <= hour < self.to_hour
        return hour >= self.from_hour or hour < self.to_hour


# ---------------------------------------------------------------------------
# Selection strategies
# ---------------------------------------------------------------------------

class SelectionStrategy(ABC):
    """Chooses which intervals of one window run are switched on."""

    name: str

    @abstractmethod
    def select(self, prices: Sequence[float], count: int) -> list[bool]:
        """Return a mask with min(count, len(prices)) entries on."""

    @abstractmethod
    def apply_price_cap(
        self,
        mask: Sequence[bool],
        prices: Sequence[float],
        max_price: float | None,
    ) -> list[bool]:
        """Switch off selections that exceed max_price. Never switches anything on."""


class ContiguousSelection(SelectionStrategy):
    """One block of consecutive intervals with the lowest total price."""

    name = "contiguous"

    def select(self, prices: Sequence[float], count: int) -> list[bool]:
        count = min(count, len(prices))
        mask = [False] * len(prices)
        if count <= 0:
            return mask
        # min() keeps the first minimum, so ties go to the earliest block
        best_start = min(
            range(len(prices) - count + 1),
            key=lambda start: sum(prices[start:start + count]),
        )
        mask[best_start:best_start + count] = [True] * count
        return mask

    def apply_price_cap(
        self,
        mask: Sequence[bool],
        prices: Sequence[float],
        max_price: float | None,
    ) -> list[bool]:
        if max_price is None:
            return list(mask)
        selected = [price for price, on in zip(prices, mask) if on]
        if selected and sum(selected) / len(selected) > max_price:
            _LOGGER.debug(
                "Block average %.3f above max price %.3f, switching block off",
                sum(selected) / len(selected), max_price,
            )
            return [False] * len(mask)
        return list(mask)


class CheapestSelection(SelectionStrategy):
    """The cheapest individual intervals, wherever they are."""

    name = "cheapest"

    def select(self, prices: Sequence[float], count: int) -> list[bool]:
        mask = [False] * len(prices)
        if count <= 0:
            return mask
        ranked = sorted(range(len(prices)), key=lambda i: (prices[i], i))
        for i in ranked[:count]:
            mask[i] = True
        return mask

    def apply_price_cap(
        self,
        mask: Sequence[bool],
        prices: Sequence[float],
        max_price: float | None,
    ) -> list[bool]:
        if max_price is None:
            return list(mask)
        return [on and price <= max_price for on, price in zip(mask, prices)]


CONTIGUOUS = ContiguousSelection()
CHEAPEST = CheapestSelection()


@dataclass(frozen=True)
class PlanConfig:
    """Validated parameters for one planning call."""

    window: Window
    hours_on: int
    contiguous: bool = False
    max_price: float | None = None
    outside_window_value: bool = False
    incomplete_window_value: bool = False

    def __post_init__(self) -> None:
        if (
            not isinstance(self.hours_on, int)
            or isinstance(self.hours_on, bool)
            or self.hours_on <= 0
        ):
            raise InvalidConfigError(
                f"hours_on must be a positive integer, got {self.hours_on!r}"
            )
        if self.max_price is not None and self.max_price < 0:
            raise InvalidConfigError(
                f"max_price must not be negative, got {self.max_price!r}"
            )

    @property
    def strategy(self) -> SelectionStrategy:
        return CONTIGUOUS if self.contiguous else CHEAPEST


# ---------------------------------------------------------------------------
# Granularity
# ---------------------------------------------------------------------------

def _utc(moment: datetime) -> datetime:
    # Same-zone comparison ignores fold, so order and subtract in UTC
    return moment.astimezone(timezone.utc)


def detect_intervals_per_hour(samples: Sequence[Sample]) -> int:
    """Infer 4, 2 or 1 intervals per hour from the first two samples."""
    if len(samples) < 2:
        return 1
    minutes = (_utc(samples[1].start) - _utc(samples[0].start)).total_seconds() / 60
    return _INTERVALS_PER_HOUR.get(minutes, 1)


# ---------------------------------------------------------------------------
# Window segmentation
# ---------------------------------------------------------------------------

def _initial_state(window: Window) -> RunState:
    """State before the first sample is seen.

    A window whose start does not precede its end (to_hour 0 counts as 24)
    is already open at midnight, so its start is missing.
    """
    to_hour = window.to_hour
    if to_hour == 0 and window.from_hour != 0:
        to_hour = 24
    if window.from_hour < to_hour:
        return RunState.OUTSIDE
    return RunState.START_MISSING


def _next_state(
    state: RunState, prev_hour: int | None, hour: int, window: Window
) -> RunState:
    """State of the first sample in a new hour of day."""
    if hour == window.from_hour:
        return RunState.INSIDE
    if (
        prev_hour is not None
        and window.contains(prev_hour)
        and not window.contains(hour)
    ):
        # The window just closed
        return RunState.OUTSIDE
    return state


def segment(samples: Sequence[Sample], window: Window) -> list[Run]:
    """Partition samples into runs relative to the daily window.

    States are only re-evaluated when the hour of day changes, so sub-hourly
    samples inherit the state of the first sample in their hour. A run only
    becomes inside at from_hour and only becomes outside when the window
    closes; every from_hour starts a new run, even directly after an inside
    run. A trailing inside run whose last sample is not in the window's last
    hour is end-missing.
    """
    if not samples:
        return []

    runs: list[Run] = []
    state = _initial_state(window)
    run_start = 0
    prev_hour: int | None = None

    for i, sample in enumerate(samples):
        hour = sample.start.hour
        if hour == prev_hour:
            continue
        new_state = _next_state(state, prev_hour, hour, window)
        new_cycle = hour == window.from_hour
        if i > 0 and (new_state is not state or new_cycle):
            runs.append(Run(state, run_start, i - 1))
            run_start = i
        state = new_state
        prev_hour = hour

    last = Run(state, run_start, len(samples) - 1)
    if state is RunState.INSIDE and samples[-1].start.hour != window.last_hour:
        last = Run(RunState.END_MISSING, last.start, last.end)
    runs.append(last)
    return runs


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def compose(
    runs: Sequence[Run],
    masks: Sequence[Sequence[bool] | None],
    config: PlanConfig,
) -> list[bool]:
    """Merge per-run masks and fallback values into one mask for the batch.

    masks is aligned with runs; entries for runs that are not inside the
    window are ignored.
    """
    result: list[bool] = []
    for run, mask in zip(runs, masks):
        if run.state is RunState.INSIDE:
            result.extend(mask)
        elif run.state is RunState.OUTSIDE:
            result.extend([config.outside_window_value] * run.length)
        else:
            result.extend([config.incomplete_window_value] * run.length)
    return result


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

def _validate_samples(samples: Sequence[Sample]) -> None:
    if not samples:
        raise EmptyInputError("No price samples to plan")
    for prev, cur in zip(samples, samples[1:]):
        if _utc(cur.start) <= _utc(prev.start):
            raise UnsortedInputError(
                f"Sample at {cur.start.isoformat()} does not follow {prev.start.isoformat()}"
            )


def _plan(
    samples: Sequence[Sample], config: PlanConfig
) -> tuple[list[Run], list[bool], int]:
    _validate_samples(samples)
    intervals_per_hour = detect_intervals_per_hour(samples)
    intervals_on = config.hours_on * intervals_per_hour
    runs = segment(samples, config.window)
    strategy = config.strategy

    masks: list[list[bool] | None] = []
    for run in runs:
        if run.state is not RunState.INSIDE:
            masks.append(None)
            continue
        prices = [s.price for s in samples[run.start:run.end + 1]]
        mask = strategy.select(prices, intervals_on)
        masks.append(strategy.apply_price_cap(mask, prices, config.max_price))

    result = compose(runs, masks, config)
    _LOGGER.debug(
        "Planned %d samples (%d/hour, %s, window %02d-%02d): %d runs, %d on",
        len(samples), intervals_per_hour, strategy.name,
        config.window.from_hour, config.window.to_hour, len(runs), sum(result),
    )
    return runs, result, intervals_per_hour


def plan(samples: Sequence[Sample], config: PlanConfig) -> list[bool]:
    """Decide which samples are switched on.

    Args:
        samples: Price samples with strictly increasing start times.
        config: Window, on-duration, strategy, price cap and fallback values.

    Returns:
        One bool per sample, True meaning on.

    Raises:
        EmptyInputError: No samples.
        UnsortedInputError: Start times are not strictly increasing.
    """
    _, result, _ = _plan(samples, config)
    return result


# ---------------------------------------------------------------------------
# Schedule construction
# ---------------------------------------------------------------------------

def build_schedule(samples: Sequence[Sample], config: PlanConfig) -> list[dict]:
    """Plan the samples and pair every decision with its time slot.

    Returns:
        List of schedule dicts:
        [{"time": str, "end": str, "price": float, "status": str,
          "window": str, "run": int}, ...]
    """
    runs, result, intervals_per_hour = _plan(samples, config)
    duration = timedelta(minutes=60 // intervals_per_hour)

    schedule: list[dict] = []
    for run_index, run in enumerate(runs):
        for i in range(run.start, run.end + 1):
            sample = samples[i]
            end = (_utc(sample.start) + duration).astimezone(sample.start.tzinfo)
            schedule.append({
                "time": sample.start.isoformat(),
                "end": end.isoformat(),
                "price": round(sample.price, 3),
                "status": "active" if result[i] else "standby",
                "window": str(run.state),
                "run": run_index,
            })
    return schedule


# ---------------------------------------------------------------------------
# State queries
# ---------------------------------------------------------------------------

def find_current_slot(schedule: list[dict], now: datetime) -> dict | None:
    """Find the schedule slot that contains the current time."""
    for s in schedule:
        start = datetime.fromisoformat(s["time"])
        end = datetime.fromisoformat(s["end"])
        if start <= now < end:
            return s
    return None


def find_next_change(
    schedule: list[dict],
    current_slot: dict | None,
    now: datetime,
) -> str | None:
    """Find the ISO timestamp of the next on/off transition.

    Returns:
        ISO timestamp of the next state change, or None.
    """
    if current_slot is None:
        return None

    current_status = current_slot.get("status")
    for slot in schedule:
        if datetime.fromisoformat(slot["time"]) <= now:
            continue
        if slot.get("status") != current_status:
            return slot["time"]
    return None


def find_switch_points(schedule: list[dict]) -> list[dict]:
    """Reduce a schedule to the points where the output changes.

    The first slot is always included so the list describes the whole schedule.
    """
    points: list[dict] = []
    previous: str | None = None
    for slot in schedule:
        if slot["status"] != previous:
            points.append({"time": slot["time"], "value": slot["status"] == "active"})
            previous = slot["status"]
    return points


def on_hours_in_current_run(schedule: list[dict], now: datetime) -> float:
    """Count on-hours in the run that contains now (0.0 when no slot matches)."""
    current = find_current_slot(schedule, now)
    if current is None:
        return 0.0
    seconds = sum(
        (datetime.fromisoformat(s["end"]) - datetime.fromisoformat(s["time"])).total_seconds()
        for s in schedule
        if s["run"] == current["run"] and s["status"] == "active"
    )
    return round(seconds / 3600, 2)
