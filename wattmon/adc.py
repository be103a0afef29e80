"""Raw ADC reading, offset tracking and sample-quality checks for AC sampling."""

from __future__ import annotations

import math
from typing import Sequence

ADC_BITS = 12
ADC_RANGE = 1 << ADC_BITS
DEFAULT_VREF_VOLTS = 2.5
MIN_SAMPLES_PER_10MS = 380
MAX_HALF_CYCLE_IMBALANCE = 10
RADIANS_TO_DEGREES = 57.29578
PHASE_BIAS_DEGREES = 0.040
DEFAULT_SHIFT = 100
DEFAULT_CYCLES = 20


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division that rounds toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def adjust_offset(offset: int, total: int, count: int, adc_range: int = ADC_RANGE) -> int:
    """Move a bias offset by the rounded mean of ``count`` samples summing to ``total``.

    The result is held within half a percent of mid-range.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    half = count // 2
    rounded = total + half if total >= 0 else total - half
    new_offset = offset + _trunc_div(rounded, count)
    low = adc_range // 2 - adc_range // 200
    high = adc_range // 2 + adc_range // 200
    return min(max(new_offset, low), high)


def check_sample_quality(samples: int, mid_cross_samples: int, elapsed_us: int) -> bool:
    """Return True if a sampled cycle is dense enough and its half cycles balance."""
    if samples < (elapsed_us * MIN_SAMPLES_PER_10MS) // 10000:
        return False
    return abs(samples - mid_cross_samples * 2) <= MAX_HALF_CYCLE_IMBALANCE


def decode_adc(b0: int, b1: int, b2: int) -> int:
    """Assemble a 12-bit conversion from the three bytes clocked out of the ADC."""
    for byte in (b0, b1, b2):
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"not a byte: {byte}")
    return ((((b0 & 0x01) << 8) | b1) << 3) + (b2 >> 5)


def aref_volts(
    adc_value: int,
    vref_volts: float = DEFAULT_VREF_VOLTS,
    adc_range: int = ADC_RANGE,
) -> float:
    """Reference voltage implied by reading the shunt reference; 0 if no ADC answers."""
    if adc_value in (0, adc_range - 1):
        return 0.0
    return vref_volts * adc_range / adc_value


def phase_difference(
    sum_ic: float,
    sum_isq: float,
    sum_csq: float,
    samples: int,
    shift: int = DEFAULT_SHIFT,
    cycles: int = DEFAULT_CYCLES,
) -> float:
    """Net phase lead in degrees between two channels sampled over ``cycles``.

    ``samples`` is the raw sample count; the ``shift + 1`` samples used to
    fill the shift buffer are not part of the sums and are taken off it.
    The artificial lag of ``shift`` samples is removed from the result.
    """
    effective = samples - (shift + 1)
    if effective <= 0:
        raise ValueError("not enough samples for the requested shift")
    irms = math.sqrt(sum_isq / effective)
    crms = math.sqrt(sum_csq / effective)
    if irms == 0 or crms == 0:
        raise ValueError("a channel has no signal")
    cosine = (sum_ic / effective) / (irms * crms)
    cosine = min(max(cosine, -1.0), 1.0)
    phase = RADIANS_TO_DEGREES * math.acos(cosine) - PHASE_BIAS_DEGREES
    shift_degrees = shift * (360.0 * cycles) / effective
    return phase - shift_degrees


def format_samples(v_samples: Sequence[int], i_samples: Sequence[int]) -> str:
    """Render sample pairs as text, one "V,I" line per pair.

    The last pair is the one taken at the closing crossing and is not
    included in the count given on the header line.
    """
    if not v_samples:
        raise ValueError("no samples")
    if len(v_samples) != len(i_samples):
        raise ValueError("voltage and current sample counts differ")
    lines = [f"samples {len(v_samples) - 1}\r\n"]
    lines.extend(f"{v},{i}\r\n" for v, i in zip(v_samples, i_samples))
    return "".join(lines)