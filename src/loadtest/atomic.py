"""Atomic value holders shared by concurrent request workers.

Each holder guards only its own value, so writers touching different
counters never contend with each other.
"""
import threading


class AtomicCounter:
    """Integer counter with atomic increment-and-fetch."""

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        """Add ``amount`` and return the new value."""
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"AtomicCounter({self.value})"


class AtomicFloat:
    """Float accumulator with atomic add."""

    def __init__(self, initial: float = 0.0):
        self._value = initial
        self._lock = threading.Lock()

    def add(self, amount: float) -> float:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> float:
        with self._lock:
            return self._value


class AtomicMax:
    """Running maximum updated through a compare-and-set loop."""

    def __init__(self, initial: float = 0.0):
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def compare_and_set(self, expected: float, new: float) -> bool:
        """Set ``new`` only if the current value is still ``expected``."""
        with self._lock:
            if self._value != expected:
                return False
            self._value = new
            return True

    def update(self, candidate: float) -> float:
        """Raise the maximum to ``candidate`` if larger; return the resulting maximum."""
        while True:
            current = self.value
            if candidate <= current:
                return current
            if self.compare_and_set(current, candidate):
                return candidate
