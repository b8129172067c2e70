import sys
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSlot

from .engine import TapTempoEngine
from .window import SampleWindow

BANNER = "Hit any key (but q) in cadence (q to quit)."
FAREWELL = "Goodbye!"
WAITING_MESSAGE = "[INFO] hit any key again to run tempo processing..."
UNMEASURABLE_MESSAGE = "[INFO] hits too close together to measure tempo..."


def tempo_line(value: str) -> str:
    return f"[TEMPO] {value} BPM"


def error_line(message) -> str:
    return f"[ERROR] {message}"


class ConsoleReporter(QObject):
    """Prints engine results, one line per processed hit.

    Tempo values are rounded with the precision of the attached engine's window.
    """

    def __init__(self, out=None, err=None, parent=None):
        super().__init__(parent)
        self._window: Optional[SampleWindow] = None
        self._out = out
        self._err = err

    def attach(self, engine: TapTempoEngine):
        self._window = engine.window
        engine.tempoChanged.connect(self.show_tempo)
        engine.tempoUnmeasurable.connect(self.show_unmeasurable)
        engine.samplesInsufficient.connect(self.show_waiting)

    # Resolved on every write so redirected streams are honoured
    def _stdout(self):
        return self._out if self._out is not None else sys.stdout

    def _stderr(self):
        return self._err if self._err is not None else sys.stderr

    def _print(self, text: str):
        print(text, file=self._stdout(), flush=True)

    def banner(self):
        self._print(BANNER)

    def farewell(self):
        self._print(FAREWELL)

    def error(self, message):
        print(error_line(message), file=self._stderr(), flush=True)

    @pyqtSlot(float, float)
    def show_tempo(self, bpm: float, interval: float):
        self._print(tempo_line(self._window.format(bpm)))

    @pyqtSlot(int)
    def show_waiting(self, count: int):
        self._print(WAITING_MESSAGE)

    @pyqtSlot()
    def show_unmeasurable(self):
        self._print(UNMEASURABLE_MESSAGE)
