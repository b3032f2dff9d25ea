"""DecaySystem -- Arrhenius-law quality degradation for perishable cargo.

    k(T)         = A * exp(-Ea / (R * T))          T in Kelvin
    acceleration = k(T) / k(T_ref)                 T_ref = 0 C
    Q(t + dt)    = Q(t) * exp(-BASE_DECAY_RATE * acceleration * dt)

Normalising by k(T_ref) makes the absolute scale of A irrelevant: at the
reference temperature the container loses exactly BASE_DECAY_RATE per
second (about 0.5% per day), and every degree above it accelerates decay.
"""

from __future__ import annotations

import math

from .entity import ContainerEntity

# Pre-exponential (frequency) factor
A = 1e8

# Activation energy, J/mol.  Fruit respiration/decay sits around 50-80 kJ/mol.
EA = 60_000.0

# Gas constant, J/(mol*K)
R = 8.314

KELVIN_OFFSET = 273.15

# Reference (optimal storage) temperature, Celsius
OPTIMAL_TEMP = 0.0

# Fractional quality loss per second at OPTIMAL_TEMP (~0.5% per day)
BASE_DECAY_RATE = 0.5 / (24.0 * 3600.0) / 100.0


def rate_constant(temp_c: float) -> float:
    """Arrhenius rate constant at *temp_c* degrees Celsius."""
    return A * math.exp(-EA / (R * (temp_c + KELVIN_OFFSET)))


_K_OPTIMAL = rate_constant(OPTIMAL_TEMP)


def acceleration_factor(temp_c: float) -> float:
    """Decay speed-up relative to storage at OPTIMAL_TEMP (1.0 at 0 C)."""
    return rate_constant(temp_c) / _K_OPTIMAL


def decayed_quality(quality: float, temp_c: float, delta_time: float) -> float:
    decay_factor = math.exp(-BASE_DECAY_RATE * acceleration_factor(temp_c) * delta_time)
    return max(0.0, min(100.0, quality * decay_factor))


class DecaySystem:
    """Degrades container quality according to its current temperature."""

    def update(self, entity: ContainerEntity, delta_time: float) -> None:
        entity.quality = decayed_quality(entity.quality, entity.current_temp, delta_time)
