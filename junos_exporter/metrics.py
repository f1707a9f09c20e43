"""Metric descriptions, metric samples and the collector interface."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any


class ValueType(enum.Enum):
    """Kind of value a metric sample carries."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class Desc:
    """Name, help text and label names of a metric family."""

    name: str
    help: str
    label_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))


@dataclass(frozen=True)
class Metric:
    """A single constant sample of a described metric."""

    desc: Desc
    value_type: ValueType
    value: float
    label_values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        values = tuple(self.label_values)
        if len(values) != len(self.desc.label_names):
            raise ValueError(
                f"metric {self.desc.name} expects {len(self.desc.label_names)} "
                f"label values, got {len(values)}"
            )
        object.__setattr__(self, "label_values", values)
        object.__setattr__(self, "value", float(self.value))

    def labels(self) -> dict[str, str]:
        """Return the labels of this sample as a name to value mapping."""
        return dict(zip(self.desc.label_names, self.label_values))


class RPCCollector(ABC):
    """A feature that turns command output of a device into metrics."""

    name: str = ""

    @abstractmethod
    def describe(self) -> list[Desc]:
        """Return the descriptions of every metric this collector emits."""

    @abstractmethod
    def collect(self, client: Any, label_values: Sequence[str]) -> Iterable[Metric]:
        """Run the collector's commands through client and yield metrics."""