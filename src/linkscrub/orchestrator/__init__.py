"""Cleaning orchestration across a provider registry."""

from linkscrub.orchestrator.engine import Orchestrator, clean

__all__ = ["Orchestrator", "clean"]
