"""Directory-gated build gate.

A component (or one of its architectures) counts as built when its
conventional output directory exists. Nothing else is inspected: a build
directory left behind by a crashed build is skipped like a complete one
until `smart-clean` removes it.
"""

import logging
from typing import Optional

from ..architecture import Architecture
from ..project import ProjectRoot
from .components import BuildContext, ComponentSpec


class BuildGate:
    """Decides whether a component needs building."""

    def __init__(
        self,
        root: ProjectRoot,
        context: BuildContext = BuildContext.STANDARD,
        logger: Optional[logging.Logger] = None,
    ):
        self.root = root
        self.context = context
        self.log = logger or logging.getLogger(__name__)

    def should_build(
        self,
        component: ComponentSpec,
        architecture: Optional[Architecture] = None,
        context: Optional[BuildContext] = None,
    ) -> bool:
        """Check whether the output directory is absent.

        Args:
            component: Component to check
            architecture: Check `<component>/build/<arch>` when given,
                otherwise `<component>/build`
            context: Override the gate's build context

        Returns:
            True if the output directory does not exist
        """
        output_dir = component.output_dir(self.root, architecture, context or self.context)
        if output_dir.exists():
            self.log.info(f"[{component.name}] Skipping build; {output_dir} already exists")
            return False
        self.log.debug(f"[{component.name}] {output_dir} not found, build required")
        return True
