"""
Migration report generator for aggregating statistics and formatting reports.

Builds a report from per-item MigrationStatus records, formats it for the
console and exports it as JSON.
"""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from logger import format_elapsed
from models import ItemKind, MigrationStatus

NEXT_STEPS = [
    "Review migrated content in the content directory",
    "Add alt text to featured images (featuredAlt field)",
    "Check inline images were downloaded correctly",
    "Fix any markdown formatting issues",
    "Run the site's dev server and preview the migrated content",
]


class MigrationReport:
    """Generates migration reports from per-item statuses."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('wp_markdown_migrator.orchestrator.migration_report')

    def generate_report(
        self,
        statuses: List[MigrationStatus],
        migration_duration: float,
        image_stats: Optional[Dict[str, int]] = None,
        dry_run: bool = False
    ) -> Dict[str, Any]:
        """
        Generate the migration report.

        Args:
            statuses: Outcome of every processed item
            migration_duration: Total duration in seconds
            image_stats: Counters from the AssetRehomer
            dry_run: Whether nothing was written

        Returns:
            Report dictionary with ``summary``, ``collections``, ``errors`` and ``items``
        """
        image_stats = image_stats or {}

        collections = {}
        for kind in ItemKind:
            counts = Counter(status.status for status in statuses if status.kind == kind)
            collections[kind.value] = {
                'total': sum(counts.values()),
                'exported': counts.get('exported', 0),
                'planned': counts.get('planned', 0),
                'failed': counts.get('failed', 0),
                'skipped': counts.get('skipped', 0),
            }

        errors = [
            {'slug': status.slug, 'kind': status.kind.value, 'error': status.error_message}
            for status in statuses
            if status.status == 'failed'
        ]

        return {
            'summary': {
                'generated_at': datetime.now(timezone.utc).isoformat(),
                'dry_run': dry_run,
                'duration_seconds': round(migration_duration, 3),
                'total_items': len(statuses),
                'total_errors': len(errors),
                'images_downloaded': (
                    image_stats.get('featured_downloaded', 0) + image_stats.get('inline_downloaded', 0)
                ),
                'images_failed': image_stats.get('failed', 0),
                'images_external': image_stats.get('skipped_external', 0),
                'images_size_bytes': image_stats.get('total_size_bytes', 0),
            },
            'collections': collections,
            'errors': errors,
            'items': [status.to_dict() for status in statuses],
        }

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """Format the report as a boxed console summary with next steps."""
        summary = report.get('summary', {})
        separator = '=' * 50
        title = 'Migration preview (dry run)' if summary.get('dry_run') else 'Migration complete!'

        lines = [separator, title, separator]
        for name, counts in report.get('collections', {}).items():
            if not counts.get('total'):
                continue
            done = counts['planned'] if summary.get('dry_run') else counts['exported']
            line = f"{name.capitalize()}: {done}/{counts['total']}"
            if counts['failed']:
                line += f" ({counts['failed']} failed)"
            if counts['skipped']:
                line += f" ({counts['skipped']} skipped)"
            lines.append(line)

        lines.append(
            f"Images: {summary.get('images_downloaded', 0)} downloaded, "
            f"{summary.get('images_failed', 0)} failed, "
            f"{summary.get('images_external', 0)} external left as-is"
        )
        lines.append(f"Duration: {format_elapsed(summary.get('duration_seconds', 0))}")

        for error in report.get('errors', []):
            lines.append(f"  FAILED {error['kind']}/{error['slug']}: {error['error']}")

        lines.append(separator)
        lines.append('')
        lines.append('Next steps:')
        lines.extend(f"{number}. {step}" for number, step in enumerate(NEXT_STEPS, start=1))

        return '\n'.join(lines)

    def export_json_report(self, report: Dict[str, Any], output_path: str) -> None:
        """Write the report as JSON, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        self.logger.info(f"Migration report saved to {path}")
