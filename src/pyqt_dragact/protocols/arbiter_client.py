"""Contract for instances that can hold the instance arbiter."""

from abc import ABC, abstractmethod


class ArbiterClient(ABC):
    """
    ABC for widget instances competing for the process-wide selection slot.

    An evicted holder must run its full cancel sequence synchronously, leaving
    its selection empty and the slot released before the new claim completes.
    """

    @property
    @abstractmethod
    def has_selection(self) -> bool:
        """True while the instance holds a non-empty selection."""
        pass

    @abstractmethod
    def cancel_selection(self) -> None:
        """Clear drag visuals and the selection, then release the arbiter."""
        pass
