"""Power, voltage and current figures computed from sampled AC cycles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

REVERSED_THRESHOLD = 5.0


@dataclass(frozen=True)
class PowerReading:
    """Result of evaluating one sampled cycle of a power channel."""

    vrms: float
    irms: float
    watts: float
    va: float
    reversed: bool = False

    @property
    def power_factor(self) -> float:
        """Ratio of real to apparent power, 0 when there is no apparent power."""
        return self.watts / self.va if self.va else 0.0


def phase_steps(phase_degrees: float, samples: int) -> tuple[int, float]:
    """Split a phase correction into whole sample steps and a fraction in [0, 1).

    A negative fraction is turned into one step back plus a positive fraction.
    """
    if samples <= 0:
        raise ValueError("samples must be positive")
    correction = phase_degrees * samples / 360.0
    steps = int(correction)
    fraction = correction - steps
    if fraction < 0:
        steps -= 1
        fraction += 1.0
    return steps, fraction


def _check_pair(v_samples: Sequence[int], i_samples: Sequence[int]) -> int:
    count = len(i_samples)
    if count == 0:
        raise ValueError("no samples")
    if len(v_samples) != count:
        raise ValueError("voltage and current sample counts differ")
    return count


def power_from_samples(
    v_samples: Sequence[int],
    i_samples: Sequence[int],
    v_ratio: float,
    i_ratio: float,
    phase_degrees: float = 0.0,
    vmult: float = 1.0,
    doubled: bool = False,
    signed: bool = False,
) -> PowerReading:
    """Compute RMS values and power from one cycle of voltage/current pairs.

    The voltage samples are shifted by ``phase_degrees`` (interpolating between
    neighbouring samples) before the sums are taken. An unsigned channel with
    negative power is reported as positive, and flagged as reversed when the
    magnitude exceeds a few watts.
    """
    count = _check_pair(v_samples, i_samples)
    steps, fraction = phase_steps(phase_degrees, count)
    voltages = list(v_samples) + [v_samples[0]]

    sum_vsq = 0.0
    sum_isq = 0.0
    sum_vi = 0.0
    v_index = (count + steps) % count
    for raw_i in i_samples:
        base = voltages[v_index]
        raw_v = base + int(fraction * (voltages[v_index + 1] - base))
        sum_vsq += raw_v * raw_v
        sum_isq += raw_i * raw_i
        sum_vi += raw_v * raw_i
        v_index = (v_index + 1) % count

    vrms = v_ratio * math.sqrt(sum_vsq / count)
    irms = i_ratio * math.sqrt(sum_isq / count)
    watts = v_ratio * i_ratio * (sum_vi / count)
    va = vrms * irms

    watts *= vmult
    va *= vmult
    if doubled:
        watts *= 2.0
        va *= 2.0

    reversed_ct = False
    if not signed and watts < 0:
        watts = -watts
        reversed_ct = watts > REVERSED_THRESHOLD

    return PowerReading(vrms=vrms, irms=irms, watts=watts, va=va, reversed=reversed_ct)


def voltage_rms(v_samples: Sequence[int], i_samples: Sequence[int], v_ratio: float) -> float:
    """RMS voltage of a cycle sampled on the same channel into both sample sets."""
    count = _check_pair(v_samples, i_samples)
    total = sum(v * v for v in v_samples) + sum(i * i for i in i_samples)
    return v_ratio * math.sqrt(total // (count * 2))