"""
Instance arbiter: which widget instance owns the in-progress selection/drag.

Most drag and key events are observed document-wide, so every instance sees
them. Only the holder responds, which keeps hover effects and drops from
leaking between instances.
"""

import logging
from typing import Optional

from pyqt_dragact.protocols.arbiter_client import ArbiterClient

logger = logging.getLogger(__name__)


class InstanceArbiter:
    """Single exclusive slot, last writer wins with forced eviction.

    Injected into each DragAct so tests can use independent arbiters; by
    default every instance shares the process-wide one.
    """

    def __init__(self):
        self._holder: Optional[ArbiterClient] = None

    @property
    def holder(self) -> Optional[ArbiterClient]:
        return self._holder

    def holds(self, instance: ArbiterClient) -> bool:
        return self._holder is instance

    def claim(self, instance: ArbiterClient) -> None:
        """Give the slot to instance, evicting any other holder first.

        The evicted holder runs its full cancel sequence synchronously, so its
        selection is empty and the slot released before this claim completes.
        """
        holder = self._holder
        if holder is not None and holder is not instance:
            logger.debug(f"[ARBITER] Evicting {type(holder).__name__} {id(holder):#x}")
            holder.cancel_selection()
            if self._holder is holder:
                # Holder cancelled without releasing
                self._holder = None

        if self._holder is not instance:
            logger.debug(f"[ARBITER] Claimed by {type(instance).__name__} {id(instance):#x}")
        self._holder = instance

    def release(self, instance: ArbiterClient) -> bool:
        """Clear the slot. Only the holder may do so, and only with an empty selection."""
        if self._holder is not instance or instance.has_selection:
            return False
        self._holder = None
        logger.debug(f"[ARBITER] Released by {type(instance).__name__} {id(instance):#x}")
        return True


_default_arbiter = InstanceArbiter()


def get_default_arbiter() -> InstanceArbiter:
    """Get the process-wide arbiter shared by instances that don't inject one."""
    return _default_arbiter
