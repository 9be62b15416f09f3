"""Prometheus text exposition."""

import io
from decimal import Decimal
from enum import Enum, auto
from typing import Sequence

from tibber_exporter.domain.consumption import ConsumptionData

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


class _WriterState(Enum):
    NO_METRIC = auto()
    METRIC_ACTIVE = auto()


class MetricsWriter:
    """
    Writes metric blocks in the order they are started.

    Each block is ``# HELP``, ``# TYPE`` and its value lines. Blocks are
    separated by exactly one blank line, emitted when the next block starts.
    """

    def __init__(self):
        self._out = io.StringIO()
        self._state = _WriterState.NO_METRIC
        self._current_metric = ""

    def start_metric(self, name: str, help_text: str, kind: MetricKind) -> None:
        if self._state is _WriterState.METRIC_ACTIVE:
            self._out.write("\n")
        self._out.write(f"# HELP {name} {help_text}\n")
        self._out.write(f"# TYPE {name} {kind.value}\n")

        self._current_metric = name
        self._state = _WriterState.METRIC_ACTIVE

    def write_value(self, value: Decimal, labels: Sequence[tuple[str, str]] = ()) -> None:
        if self._state is not _WriterState.METRIC_ACTIVE:
            raise RuntimeError("write_value() called before start_metric()")

        label_str = ",".join(f'{label}="{label_value}"' for label, label_value in labels)
        # Fixed point formatting keeps the exact digits, never an exponent
        self._out.write(f"{self._current_metric} {{{label_str}}} {value:f}\n")

    def finalize(self) -> str:
        return self._out.getvalue()


def render_consumption(data: ConsumptionData) -> str:
    writer = MetricsWriter()
    writer.start_metric(
        "smartmeter_consumption_wh_total",
        "The total consumption value in Wh",
        MetricKind.COUNTER,
    )
    writer.write_value(data.total_consumption_wh)

    writer.start_metric("smartmeter_power_w", "The current power in W", MetricKind.GAUGE)
    writer.write_value(data.current_power_w)

    return writer.finalize()
