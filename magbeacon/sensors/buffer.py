"""
Double-buffered circular sample storage.

Each magnetic sensor owns one CircularSampleBuffer: a fixed arena of
``amount_of_buffers`` slots of ``sample_size`` samples each. The producer
(the acquisition tick) writes the *active* slot; once it fills, the active
slot advances and the filled slot becomes the *completed* slot that the
consumer (spectral extraction) reads. With the conventional two slots the
producer and the consumer never touch the same memory, so no lock is needed
for one producer and one consumer.

The producer/consumer contract is expressed by two narrow handles over the
same arena:

    SampleProducer: append() only
    SampleConsumer: window() / reset() of the completed slot only

Example:
    >>> buf = CircularSampleBuffer(sample_size=11)
    >>> producer, consumer = buf.producer(), buf.consumer()
    >>> completed = [producer.append(float(i)) for i in range(11)]
    >>> completed[-1], buf.active_slot
    (True, 1)
    >>> consumer.window()[:3]
    array([0., 1., 2.])
"""

import numpy as np

from magbeacon.config import MIN_BINS


class CircularSampleBuffer:
    """
    Fixed-size multi-slot sample arena with a write cursor.

    Attributes:
        sample_size: Samples per slot (N > 10).
        amount_of_buffers: Number of slots (>= 1).
        write_cursor: Next write index within the active slot (0..N-1).
        active_slot: Slot currently written by the producer.
    """

    def __init__(self, sample_size: int, amount_of_buffers: int = 2):
        """
        Allocate the sample arena.

        Args:
            sample_size: Samples per slot. Must be greater than 10.
            amount_of_buffers: Number of alternating slots. Must be >= 1.

        Raises:
            ValueError: If the configuration is invalid.
        """
        if sample_size <= MIN_BINS:
            raise ValueError(
                f"sample_size must be greater than {MIN_BINS}, got {sample_size}"
            )
        if amount_of_buffers < 1:
            raise ValueError(
                f"amount_of_buffers must be >= 1, got {amount_of_buffers}"
            )

        self.sample_size = int(sample_size)
        self.amount_of_buffers = int(amount_of_buffers)
        self.write_cursor = 0
        self.active_slot = 0
        self._samples = np.zeros((self.amount_of_buffers, self.sample_size))

    @property
    def completed_slot(self) -> int:
        """Slot one step behind the active slot (last fully written window)."""
        return (self.active_slot - 1) % self.amount_of_buffers

    def append(self, sample: float) -> bool:
        """
        Write one sample into the active slot.

        Returns:
            True if this sample completed the active slot. The cursor is then
            back at 0 and the active slot has advanced, so the completed
            window is available through ``completed_window()``.
        """
        self._samples[self.active_slot, self.write_cursor] = sample
        self.write_cursor += 1

        if self.write_cursor < self.sample_size:
            return False

        self.write_cursor = 0
        self.active_slot = (self.active_slot + 1) % self.amount_of_buffers
        return True

    def slot(self, index: int) -> np.ndarray:
        """Read-only view of one slot."""
        if not 0 <= index < self.amount_of_buffers:
            raise IndexError(
                f"slot index must be in [0, {self.amount_of_buffers - 1}], got {index}"
            )
        view = self._samples[index]
        view.flags.writeable = False
        return view

    def completed_window(self) -> np.ndarray:
        """Copy of the last fully written window."""
        return self._samples[self.completed_slot].copy()

    def reset_completed_slot(self) -> None:
        """Zero-fill the completed slot once the consumer is done with it."""
        self._samples[self.completed_slot, :] = 0.0

    def producer(self) -> "SampleProducer":
        return SampleProducer(self)

    def consumer(self) -> "SampleConsumer":
        return SampleConsumer(self)

    def __repr__(self) -> str:
        return (
            f"CircularSampleBuffer(sample_size={self.sample_size}, "
            f"amount_of_buffers={self.amount_of_buffers}, "
            f"active_slot={self.active_slot}, write_cursor={self.write_cursor})"
        )


class SampleProducer:
    """Write-side handle: appends into the active slot only."""

    def __init__(self, buffer: CircularSampleBuffer):
        self._buffer = buffer

    def append(self, sample: float) -> bool:
        return self._buffer.append(sample)


class SampleConsumer:
    """Read-side handle: sees only the completed slot."""

    def __init__(self, buffer: CircularSampleBuffer):
        self._buffer = buffer

    @property
    def completed_slot(self) -> int:
        return self._buffer.completed_slot

    def window(self) -> np.ndarray:
        return self._buffer.completed_window()

    def reset(self) -> None:
        self._buffer.reset_completed_slot()
