# what the display shows, as one value instead of separate loading/error/result flags

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
from .models import RetrievalError, WeatherSnapshot


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Resolved:
    snapshot: WeatherSnapshot


@dataclass(frozen=True)
class Failed:
    error: RetrievalError


ViewState = Union[Idle, Loading, Resolved, Failed]


def from_outcome(outcome: Union[WeatherSnapshot, RetrievalError]) -> ViewState:
    if isinstance(outcome, RetrievalError):
        return Failed(outcome)
    return Resolved(outcome)
