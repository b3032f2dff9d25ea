"""ThermalSystem -- reefer unit response against ambient heat ingress.

Discrete-time first-order approximation, evaluated per container per tick:

    ambient    = 25 - 10 * (|lat| / 90)            # 25 C equator, 15 C poles
    leak       = HEAT_LEAK_RATE * (ambient - current)
    correction = max(-REEFER_COOLING_RATE, -error / max(dt, MIN_DT))  if error > 0
               = 0                                                     otherwise
    current   += (leak + correction) * dt, clamped to [-5, 40]

The reefer only cools.  A container sitting below its setpoint drifts with
the leak term alone.
"""

from __future__ import annotations

from .entity import ContainerEntity

EQUATOR_AMBIENT = 25.0
POLE_AMBIENT = 15.0

# Max cooling, degrees per second (~36 C per hour)
REEFER_COOLING_RATE = 0.01

# Degrees per second per degree of differential
HEAT_LEAK_RATE = 0.0001

# Floor for the correction divisor
MIN_DT = 0.001

MIN_TEMP = -5.0
MAX_TEMP = 40.0


def ambient_temperature(lat: float) -> float:
    """Outside air temperature at latitude *lat* (degrees)."""
    equator_distance = abs(lat) / 90.0
    return EQUATOR_AMBIENT - (EQUATOR_AMBIENT - POLE_AMBIENT) * equator_distance


def reefer_correction(current_temp: float, target_temp: float, delta_time: float) -> float:
    """Cooling rate the reefer applies this step (<= 0, degrees per second)."""
    temp_error = current_temp - target_temp
    if temp_error <= 0.0:
        return 0.0
    # Sized so one step lands on the setpoint instead of overshooting it
    return max(-REEFER_COOLING_RATE, -temp_error / max(delta_time, MIN_DT))


def next_temperature(current_temp: float, target_temp: float, lat: float, delta_time: float) -> float:
    heat_leak = HEAT_LEAK_RATE * (ambient_temperature(lat) - current_temp)
    correction = reefer_correction(current_temp, target_temp, delta_time)
    updated = current_temp + (heat_leak + correction) * delta_time
    return max(MIN_TEMP, min(MAX_TEMP, updated))


class ThermalSystem:
    """Applies heat leak and reefer cooling to a container."""

    def update(self, entity: ContainerEntity, delta_time: float) -> None:
        entity.current_temp = next_temperature(
            entity.current_temp, entity.target_temp, entity.position.lat, delta_time,
        )
