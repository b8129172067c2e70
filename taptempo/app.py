import logging
import sys
from typing import Callable, List, Optional

from .config import TempoConfig, load_config
from .console import ConsoleReporter
from .engine import TapTempoEngine
from .terminal import Key, raw_mode, read_key
from .window import InvalidConfiguration, SampleWindow

_LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(
    window: SampleWindow,
    reporter: ConsoleReporter,
    stream=None,
    clock: Optional[Callable[[], int]] = None,
) -> TapTempoEngine:
    """Read keys until a quit key, feeding every hit to a tempo engine."""
    engine = TapTempoEngine(window, clock=clock)
    reporter.attach(engine)

    while True:
        # Raw mode only for the read itself; output happens in cooked mode.
        with raw_mode(stream) as keys:
            key = read_key(keys)
            # Stamp the hit as soon as the key arrives
            now = engine.now()
        if key is Key.QUIT:
            break
        if key is Key.IGNORE:
            continue
        engine.hit(now)

    return engine


def main(argv: Optional[List[str]] = None) -> int:
    config: TempoConfig = load_config(sys.argv[1:] if argv is None else argv)
    _configure_logging(config.verbose)
    reporter = ConsoleReporter()

    try:
        window = config.build_window()
    except InvalidConfiguration as exc:
        reporter.error(exc)
        return 1

    _LOGGER.debug(
        "Window of %d samples, reset after %ds idle, %d digit(s)",
        window.capacity,
        config.reset_time,
        window.precision,
    )
    reporter.banner()
    try:
        run(window, reporter)
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        reporter.error(exc)
        return 1

    reporter.farewell()
    return 0
