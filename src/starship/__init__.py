"""
Starship - Build orchestrator for the Starship OS.

Builds the microkernel, userland and managed runtime for each enabled
architecture, tracks failed builds in the project's properties file and
cleans them up on request.
"""

__version__ = "0.1.0"
