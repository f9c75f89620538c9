"""Process bootstrap: telemetry, scope identity, runtime, entry task.

Steps run in a fixed order exactly once per process::

    resolve endpoint -> init telemetry -> configure scope -> build runtime
    -> block on entry task -> close telemetry guard

The telemetry guard is opened first and closed last so that reports captured
anywhere during the run, including a failing entry task, are flushed before
the process exits.
"""

import logging
from collections.abc import Mapping
from contextlib import nullcontext
from typing import Any

import sentry_sdk

from cap_desktop.config import BootstrapConfig, resolve_build_mode
from cap_desktop.runtime import EntryTask, build_runtime
from cap_desktop.telemetry import configure_scope, init_telemetry, resolve_endpoint

logger = logging.getLogger(__name__)


def exit_code(result: Any) -> int:
    """Map the entry task's return value to a process exit code."""
    if isinstance(result, int) and not isinstance(result, bool):
        return result
    return 0


def bootstrap(
    entry: EntryTask,
    config: BootstrapConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Run the bootstrap sequence and hand control to the entry task.

    Args:
        entry: The application's async entry task (called with no arguments)
        config: Effective bootstrap configuration (default: BootstrapConfig())
        environ: Environment mapping used to find the Sentry endpoint
            (default: os.environ)

    Returns:
        Exit code derived from the entry task's result

    Raises:
        TelemetryInitError: If Sentry is configured but cannot start
        RuntimeBuildError: If the runtime cannot be built; the entry task is
            never called
        Exception: Anything the entry task raises, after it was reported
    """
    config = config or BootstrapConfig()
    mode = resolve_build_mode(config)
    endpoint = resolve_endpoint(environ)
    logger.debug(f"Bootstrapping in {mode.value} mode (telemetry {'on' if endpoint else 'off'})")

    guard = init_telemetry(endpoint, mode, config.telemetry)

    with guard or nullcontext():
        configure_scope(mode)
        runtime = build_runtime(config.runtime.worker_threads)
        try:
            result = runtime.block_on(entry)
        except Exception:
            sentry_sdk.capture_exception()
            raise

    return exit_code(result)
