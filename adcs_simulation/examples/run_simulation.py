#!/usr/bin/env python3
"""
ADCS Simulation Example
=======================

Loads a configuration file, runs it with a simple rate-damping controller
on the Z reaction wheel, and prints a summary.

Usage:
  python3 -m adcs_simulation.examples.run_simulation
  python3 -m adcs_simulation.examples.run_simulation path/to/config.yaml --plot wheel.png
"""

import argparse
import logging
import time
from pathlib import Path

import numpy as np

from adcs_simulation.core.config import load_config
from adcs_simulation.core.simulator import Simulator

DEFAULT_CONFIG = Path(__file__).with_name("simulator.yaml")


class RateDampingController:
    """
    Drive body Z rate to zero with the Z wheel.

    Reports the objective satisfied once the gyro rate magnitude stays
    below the allowed jitter for the required hold time.
    """

    def __init__(self, wheel: str, gyro: str, gain: float = 2000.0,
                 jitter_deg_s: float = 0.05, hold_time_ms: int = 500):
        self.wheel = wheel
        self.gyro = gyro
        self.gain = gain
        self.jitter_rad_s = np.radians(jitter_deg_s)
        self.hold_time_ms = hold_time_ms
        self.settled_since = None

    def __call__(self, sim: Simulator, events):
        for event in events:
            if event.device != self.gyro:
                continue
            omega = event.payload.value
            # Spinning the wheel with the body removes body rate
            sim.command(self.wheel, self.gain * omega[2])

            if np.linalg.norm(omega) < self.jitter_rad_s:
                if self.settled_since is None:
                    self.settled_since = event.time_ms
                elif event.time_ms - self.settled_since >= self.hold_time_ms:
                    sim.stop()
            else:
                self.settled_since = None


def plot_wheel(sim: Simulator, wheel: str, gyro: str, path: Path):
    """Plot wheel speed and body rate (requires matplotlib)."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    wheel_data = sim.actuator_history(wheel)
    gyro_data = sim.sensor_history(gyro)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 7), sharex=True)
    ax1.plot(wheel_data[:, 0] / 1000.0, wheel_data[:, 2])
    ax1.set_ylabel("Wheel rate [rad/s]")
    ax1.grid(True, alpha=0.3)
    ax2.plot(gyro_data[:, 0] / 1000.0, np.degrees(gyro_data[:, 3]))
    ax2.set_ylabel("Body Z rate [deg/s]")
    ax2.set_xlabel("Time [s]")
    ax2.grid(True, alpha=0.3)
    plt.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run an ADCS simulation")
    parser.add_argument("config", nargs="?", type=Path, default=DEFAULT_CONFIG)
    parser.add_argument("--exit-config", type=Path, default=None,
                        help="YAML file with controller targets")
    parser.add_argument("--wheel", default="ReactionWheelZ")
    parser.add_argument("--gyro", default="Gyro1")
    parser.add_argument("--plot", type=Path, default=None, help="Save wheel/body plot")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config, args.exit_config)
    sim = Simulator(config)

    targets = config.targets
    if args.wheel in sim.actuators and args.gyro in sim.sensors:
        sim.add_controller(RateDampingController(
            args.wheel, args.gyro,
            jitter_deg_s=targets.allowed_jitter or 0.05,
            hold_time_ms=targets.hold_time_ms or 500,
        ))

    print("=" * 60)
    print("ADCS Simulation")
    print("=" * 60)
    print(f"  Config: {args.config}")
    print(f"  Sensors: {', '.join(sim.sensors) or '-'}")
    print(f"  Actuators: {', '.join(sim.actuators) or '-'}")
    print(f"  Timestep: {sim.clock.state.mode.value}")
    print(f"  Timeout: {config.timeout_ms} ms")

    start_time = time.time()
    result = sim.run()
    elapsed = time.time() - start_time

    print(f"\nSimulation complete in {elapsed:.2f}s")
    print(f"  Outcome: {result.outcome.value}")
    print(f"  Simulated time: {sim.clock.current_seconds:.3f} s in {result.step_count} ticks")
    print(f"  Events: {len(result.events)}")
    print(f"  Body rate: {np.degrees(sim.body.velocity)} deg/s")
    for name, actuator in sim.actuators.items():
        print(f"  {name}: {actuator.state.velocity:.3f} rad/s ({actuator.wheel_speed_rpm:.0f} rpm)")

    if args.plot and args.wheel in sim.actuators and args.gyro in sim.sensors:
        plot_wheel(sim, args.wheel, args.gyro, args.plot)
        print(f"\nPlot saved to {args.plot}")

    return 0 if result.objective_reached else 1


if __name__ == "__main__":
    raise SystemExit(main())
