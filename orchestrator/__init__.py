"""
Orchestration package for the WordPress migration pipeline.

Sequences Fetch → Rehome → Convert → Emit for every item and aggregates the
per-item outcomes into a report.
"""

from .migration_orchestrator import MigrationOrchestrator
from .migration_report import MigrationReport

__all__ = [
    'MigrationOrchestrator',
    'MigrationReport'
]
