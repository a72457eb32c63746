"""Reporting for rename runs."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .utils import ensure_directory

logger = logging.getLogger(__name__)


class RenameReporter:
    """Generates human-readable summaries of rename runs."""

    def __init__(self, config):
        """Initialize reporter with configuration."""
        self.config = config

    def generate_summary_report(self, results: Dict[str, Any]) -> str:
        """
        Generate human-readable summary report.

        Args:
            results: Results from RenameExecutor.run()

        Returns:
            Formatted summary report
        """
        stats = results.get('statistics', {})

        report = []
        report.append("=" * 50)
        report.append("MEDIA RENAME SUMMARY REPORT")
        report.append("=" * 50)
        report.append(f"Completed: {results.get('timestamp', 'Unknown')}")
        report.append(f"Mode: {'DRY RUN' if results.get('dry_run', False) else 'LIVE RUN'}")
        report.append(f"Output: {results.get('output_dir', 'N/A')}")
        report.append(f"Duration: {results.get('duration_seconds', 0):.1f}s")
        report.append("")

        report.append("=== FILE STATISTICS ===")
        report.append(f"• Files discovered: {stats.get('discovered', 0):,}")
        verb = "to rename" if results.get('dry_run', False) else "renamed"
        report.append(f"• Files {verb}: {stats.get('renamed', 0):,} "
                      f"({stats.get('renamed_size_human', '0B')})")
        report.append(f"• Named by ordinal (no timestamp): {stats.get('ordinal_named', 0):,}")
        report.append(f"• Skipped, unknown file type: {stats.get('skipped_unknown_type', 0):,}")
        report.append(f"• Skipped, no timestamp: {stats.get('skipped_no_timestamp', 0):,}")
        report.append("")

        if results.get('dry_run', False):
            report.append("Run again without --dry-run to move the files.")
        return "\n".join(report)

    def save_report(self, results: Dict[str, Any], filename: Optional[str] = None) -> str:
        """
        Save summary report and planned moves to file.

        Args:
            results: Results dictionary
            filename: Report path (auto-generated in the output directory if None)

        Returns:
            Path to saved report file
        """
        if filename is None:
            timestamp = results.get('timestamp', 'unknown').replace(':', '-')
            report_file = Path(self.config.get_output_dir()) / f"rename_report_{timestamp}.txt"
        else:
            report_file = Path(filename)
        ensure_directory(report_file.parent)

        lines = [self.generate_summary_report(results), "", "=== MOVES ==="]
        lines.extend(f"{source}\t{destination}" for source, destination in results.get('planned', []))

        try:
            with open(report_file, 'w') as f:
                f.write("\n".join(lines) + "\n")
        except Exception as e:
            logger.error(f"Failed to save report: {e}")
            raise

        logger.info(f"Report saved: {report_file}")
        return str(report_file)
