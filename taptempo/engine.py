import logging
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QElapsedTimer, pyqtSignal, pyqtSlot

from .window import SampleWindow

_LOGGER = logging.getLogger(__name__)


class TapTempoEngine(QObject):
    """Drives a SampleWindow from key hits and publishes the resulting tempo.

    Every hit emits exactly one of tempoChanged, tempoUnmeasurable or
    samplesInsufficient. Connections are direct, so no Qt event loop is needed.
    """

    tempoChanged = pyqtSignal(float, float)  # bpm, mean interval in seconds
    tempoUnmeasurable = pyqtSignal()  # hits landed on the same clock tick
    samplesInsufficient = pyqtSignal(int)  # sample count
    windowReset = pyqtSignal(bool)  # idle

    def __init__(self, window: SampleWindow, clock: Optional[Callable[[], int]] = None, parent=None):
        super().__init__(parent)
        self._window = window
        self._clock = clock
        self._timer = None
        if clock is None:
            # Monotonic, nanosecond resolution
            self._timer = QElapsedTimer()
            self._timer.start()

    @property
    def window(self) -> SampleWindow:
        return self._window

    def now(self) -> int:
        if self._clock is not None:
            return int(self._clock())
        return int(self._timer.nsecsElapsed())

    def hit(self, now: Optional[int] = None) -> Optional[float]:
        """Register one hit and return the new BPM, or None when there is none yet."""
        if now is None:
            now = self.now()

        if self._window.is_idle(now):
            _LOGGER.debug(
                "Idle for more than %ss, restarting tempo estimation",
                self._window.idle_reset_duration,
            )
            self._window.reset()
            self.windowReset.emit(True)

        count = self._window.record(now)
        interval = self._window.estimate()
        if interval is None:
            _LOGGER.debug("Recorded hit at %d ns, %d sample(s) held", now, count)
            self.samplesInsufficient.emit(count)
            return None

        bpm = self._window.tempo()
        if bpm is None:
            _LOGGER.debug("Zero interval across %d samples, no tempo", count)
            self.tempoUnmeasurable.emit()
            return None

        _LOGGER.debug("Mean interval %.6fs over %d samples -> %.3f BPM", interval, count, bpm)
        self.tempoChanged.emit(bpm, interval)
        return bpm

    @pyqtSlot()
    def reset(self):
        self._window.reset()
        self.windowReset.emit(False)
