#!/usr/bin/env python3
"""
Main CLI entrypoint for the geodesic simulation engine.

Loads configuration, initializes the engine service, and runs the integration
loop with logging, periodic progress reports and graceful shutdown handling.
"""
import argparse
import logging
import signal
import sys
import time
from typing import Optional

from pkgs.engine_runtime import EngineConfig, StepRequest, load_config
from pkgs.observability import setup_logging
from .engine_service import EngineService

logger = logging.getLogger('EngineMain')


class EngineRunner:
    """Main runner for the engine with graceful shutdown support."""

    def __init__(self, config: EngineConfig):
        self.config = config
        self.engine = EngineService(self.config)
        self.running = False
        self.shutdown_requested = False

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        self.shutdown_requested = True

    def _save_recordings(self):
        result = self.engine.save_recordings()
        if result['success']:
            logger.info(f"Recordings saved: {result['message']}")
        else:
            logger.error(f"Failed to save recordings: {result['message']}")

    def initialize(self) -> bool:
        result = self.engine.init()
        if result['success']:
            logger.info(f"Engine initialized successfully: {result['message']}")
            return True
        logger.error(f"Engine initialization failed: {result['message']}")
        return False

    def run_simulation(self) -> bool:
        """Run the integration loop; returns False when a step fails."""
        if not self.initialize():
            return False

        self.running = True
        integ = self.config.integrator
        logger.info(f"Starting simulation with {integ.steps} steps of dτ={integ.dt}")
        start_time = time.time()
        ok = True

        try:
            for step in range(1, integ.steps + 1):
                if self.shutdown_requested:
                    logger.info("Shutdown requested, stopping simulation...")
                    break

                result = self.engine.step(StepRequest(dt=integ.dt))
                if not result.success:
                    logger.error(f"Step {step} failed: {result.message}")
                    ok = False
                    break

                if step % integ.log_interval == 0:
                    logger.info(
                        f"Step {step:5d}/{integ.steps}: τ={result.proper_time:.3f}, "
                        f"x={[round(c, 4) for c in result.position]}, g(u,u)={result.norm:+.3e}"
                    )

            logger.info(f"Simulation finished in {time.time() - start_time:.2f} seconds")
            self._save_recordings()
            return ok

        finally:
            self.running = False

    def shutdown(self):
        result = self.engine.shutdown()
        if result['success']:
            logger.info("Engine shutdown completed")
        else:
            logger.error(f"Engine shutdown error: {result['message']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Arxis relativistic geodesic engine')
    parser.add_argument(
        '--config', '-c',
        default='configs/default.yaml',
        help='Path to configuration file (default: configs/default.yaml)'
    )
    parser.add_argument('--steps', type=int, default=None, help='Override integrator.steps')
    parser.add_argument('--dt', type=float, default=None, help='Override integrator.dt')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.steps is not None:
        config.integrator.steps = args.steps
    if args.dt is not None:
        config.integrator.dt = args.dt

    level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(level, config.logging.format, config.logging.file)

    runner = EngineRunner(config)
    try:
        return 0 if runner.run_simulation() else 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        runner.shutdown()


if __name__ == '__main__':
    sys.exit(main())
