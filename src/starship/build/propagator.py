"""Projects failed build outcomes into persisted clean flags."""

import logging
from typing import Optional

from ..config.flag_store import FlagStore
from .components import ComponentSpec
from .outcome import BuildOutcome


class CleanFlagPropagator:
    """Marks a component dirty when one of its builds fails.

    The flag is persisted as soon as the failure is observed, so an
    interrupted run still leaves the component marked for cleaning.
    """

    def __init__(self, store: FlagStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.log = logger or logging.getLogger(__name__)

    def on_outcome(self, component: ComponentSpec, outcome: BuildOutcome) -> bool:
        """Record an outcome.

        Args:
            component: Component the outcome belongs to
            outcome: Result of one pipeline run

        Returns:
            True if the clean flag was set

        Raises:
            StoreUnavailable: If the store cannot be read
            StoreWriteFailed: If the store cannot be written
        """
        if not outcome.failed:
            return False

        self.store.set_flags({component.clean_flag: True})
        self.log.warning(f"{component.clean_flag}=true stored after failed {outcome.architecture} build")
        return True
