"""
Tank Levers - Main Entry Point

Ties together:
- Device directory (config/tank.yaml, simulated or Modbus devices)
- Discovery of levers, drive rotors and displays by name
- Mapping engine (lever angle -> rotor target velocity)
- Status aggregator (channel text -> displays, console, log)

and runs the control loop on a fixed cadence: one tick every
`update_every` base ticks (default 10 at 60 Hz).

Usage:
    python -m tank_levers.main
    python -m tank_levers.main --devices config/tank.yaml --ticks 100 --verbose
"""

import argparse
import logging
import signal
import sys
import time
from typing import Optional

from tank_levers.control.discovery import discover
from tank_levers.control.mapping import MappingConfig, MappingEngine
from tank_levers.control.registry import ControlRegistry
from tank_levers.control.status import StatusAggregator
from tank_levers.drivers.directory import StaticDirectory
from tank_levers.drivers.modbus_port import ModbusBus
from tank_levers.drivers.ports import ConsoleSink, LogSink
from tank_levers.shared.types import EngineState, TickReport
from tank_levers.utils.config import ConfigError, load_config, load_devices

logger = logging.getLogger(__name__)


class TankController:
    """
    Main application class that orchestrates all components.

    Flow:
        Directory -> Discovery -> Registry
        every tick: Registry + hinges -> Mapping Engine -> rotors
                                                       -> Status Aggregator -> displays
    """

    def __init__(self, config: dict = None, devices_path: str = None):
        """
        Initialize the controller.

        Args:
            config: Configuration dict (see utils.config.DEFAULT_CONFIG)
            devices_path: Device file, defaults to config/tank.yaml
        """
        self.config = config or load_config()
        self.devices_path = devices_path

        self.bus: Optional[ModbusBus] = None
        self.registry: Optional[ControlRegistry] = None
        self.engine: Optional[MappingEngine] = None
        self.state: Optional[EngineState] = None
        self.aggregator: Optional[StatusAggregator] = None

        self.running = False

        # tick timing
        self.ticks = 0
        self.failed_ticks = 0
        self.total_tick_ms = 0.0
        self.max_tick_ms = 0.0

    @property
    def period(self) -> float:
        """Seconds between ticks."""
        scheduler = self.config["scheduler"]
        return scheduler["update_every"] / scheduler["base_tick_hz"]

    def setup(self, directory=None, controller_surface=None, echo=None):
        """
        Discover devices and build the engine.

        Args:
            directory: Use this directory instead of loading the device file
            controller_surface: Text sink for the controller's own screen
            echo: Text sink for diagnostic output

        Raises:
            ConfigError: Bad device file
            ConnectionError: Modbus line could not be opened
        """
        logger.info("Setting up Tank Levers...")
        construct = self.config["controller"]["construct"]

        if directory is None:
            modbus = self.config["modbus"]
            if modbus.get("enabled"):
                self.bus = ModbusBus.from_config(modbus)
                if not self.bus.connect():
                    raise ConnectionError(f"Could not open Modbus {modbus.get('method')} connection")
            directory = StaticDirectory.from_config(
                load_devices(self.devices_path), construct, bus=self.bus
            )

        self.registry = discover(directory, construct)

        self.engine = MappingEngine(MappingConfig.from_dict(self.config["control"]))
        self.state = self.engine.new_state()

        self.aggregator = StatusAggregator(
            controller_surface=controller_surface or ConsoleSink(redraw=sys.stdout.isatty()),
            echo=echo or LogSink(logging.getLogger("tank_levers.echo"), logging.DEBUG),
        )

        logger.info(f"Setup complete. Tick every {self.period * 1000:.0f}ms.")

    def tick(self) -> TickReport:
        """Run the mapping engine once and publish the result."""
        start = time.perf_counter()

        report = self.engine.run_tick(self.registry, self.state)
        self.aggregator.publish(self.registry, report)

        self._record_tick((time.perf_counter() - start) * 1000)
        return report

    def run(self, max_ticks: Optional[int] = None):
        """
        Tick on a fixed cadence until stopped or max_ticks reached.

        A tick that raises is logged and skipped; the next tick re-reads
        every device.
        """
        logger.info("Starting control loop...")
        self.running = True
        previous_handler = signal.signal(signal.SIGINT, self.stop)

        next_tick = time.monotonic()
        count = 0
        try:
            while self.running:
                try:
                    self.tick()
                except Exception:
                    self.failed_ticks += 1
                    logger.exception("Tick failed")

                count += 1
                if max_ticks is not None and count >= max_ticks:
                    break

                next_tick += self.period
                delay = next_tick - time.monotonic()
                if delay > 0:
                    time.sleep(delay)
                else:
                    # overran; don't try to catch up
                    next_tick = time.monotonic()
        finally:
            signal.signal(signal.SIGINT, previous_handler)
            self._log_tick_stats()
            self.cleanup()

    def stop(self, *args):
        logger.info("Shutting down...")
        self.running = False

    def _record_tick(self, tick_ms: float):
        self.ticks += 1
        self.total_tick_ms += tick_ms
        self.max_tick_ms = max(self.max_tick_ms, tick_ms)
        if tick_ms > self.period * 1000:
            logger.warning(f"Tick took {tick_ms:.1f}ms, longer than the {self.period * 1000:.0f}ms period")

    def _log_tick_stats(self):
        if self.ticks == 0:
            logger.info("No ticks completed.")
            return
        avg = self.total_tick_ms / self.ticks
        logger.info(
            f"{self.ticks} ticks, {self.failed_ticks} failed, "
            f"{avg:.2f}ms avg, {self.max_tick_ms:.2f}ms max"
        )

    def cleanup(self):
        """Clean up resources."""
        if self.bus:
            self.bus.close()
        logger.info("Cleanup complete.")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Tank Levers control loop")
    parser.add_argument("--config", "-c", help="Settings file (default: ./config/settings.yaml, then the bundled one)")
    parser.add_argument("--devices", "-d", help="Device file (default: ./config/tank.yaml, then the bundled one)")
    parser.add_argument("--ticks", "-n", type=int, help="Stop after this many ticks")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    controller = TankController(load_config(args.config), devices_path=args.devices)
    try:
        controller.setup()
    except (ConfigError, ConnectionError) as e:
        logger.error(f"Setup failed: {e}")
        return 1

    controller.run(max_ticks=args.ticks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
