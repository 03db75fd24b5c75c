"""
Manual Review Logger - Tracks DDL that could not be converted automatically.
Creates a separate, easily accessible JSON file next to the conversion output.
"""
import os
import json
from datetime import datetime
from typing import Dict, Optional


# Predefined issue types and suggested actions
MANUAL_REVIEW_PATTERNS = {
    'MALFORMED_STATEMENT': {
        'severity': 'ERROR',
        'suggested_action': 'Fix or hand-write the resource; the statement was recognised but not converted'
    },
    'PARTIAL_EXTRACTION': {
        'severity': 'WARNING',
        'suggested_action': 'Check the generated block; a column, constraint or option was dropped'
    },
    'VIEW_SQL_UNPARSEABLE': {
        'severity': 'WARNING',
        'suggested_action': 'Verify the view statement runs on Snowflake before applying the plan'
    },
}


class ManualReviewLogger:
    """Handles logging of manual review items to a dedicated file."""

    def __init__(self, output_dir: str, logger=None):
        self.output_dir = output_dir
        self.logger = logger
        self.review_items = []
        self.log_file_path = None

    def log_manual_review_item(self,
                               file_path: str,
                               object_name: str,
                               issue_type: str,
                               message: str,
                               severity: Optional[str] = None,
                               suggested_action: Optional[str] = None,
                               object_type: str = 'UNKNOWN',
                               statement_index: Optional[int] = None):
        """Log an item that requires manual review."""
        pattern = MANUAL_REVIEW_PATTERNS.get(issue_type, {})
        severity = severity or pattern.get('severity', 'WARNING')

        review_item = {
            'timestamp': datetime.now().isoformat(),
            'file_path': file_path,
            'object_name': object_name,
            'object_type': object_type,
            'issue_type': issue_type,
            'severity': severity,
            'message': message,
            'suggested_action': suggested_action or pattern.get('suggested_action'),
            'statement_index': statement_index,
            'status': 'PENDING_REVIEW'
        }

        self.review_items.append(review_item)

        # Also log to main logger if available
        if self.logger:
            log_msg = f"MANUAL REVIEW [{severity}] {file_path}::{object_name} - {issue_type}: {message}"
            if severity == 'ERROR':
                self.logger.error(log_msg)
            else:
                self.logger.warning(log_msg)

    def write_manual_review_log(self) -> Optional[str]:
        """Write all manual review items to a dedicated log file."""
        if not self.review_items:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_filename = f"manual_review_required_{timestamp}.json"
        self.log_file_path = os.path.join(self.output_dir, log_filename)

        os.makedirs(self.output_dir, exist_ok=True)

        summary_data = {
            'conversion_timestamp': timestamp,
            'total_items_requiring_review': len(self.review_items),
            'summary_by_type': self._create_summary_by_type(),
            'summary_by_severity': self._create_summary_by_severity(),
            'summary_by_file': self._create_summary_by_file(),
            'review_items': self.review_items,
            'instructions': {
                'overview': 'DDL statements and view queries that were not converted, or only partly converted, to Terraform.',
                'next_steps': [
                    '1. Review each item in the review_items section',
                    '2. For each item, check the suggested_action if provided',
                    '3. Fix the source DDL or edit the generated .tf file',
                    '4. Update the status field to COMPLETED when done',
                    '5. Re-run conversion if needed'
                ],
                'severity_levels': {
                    'ERROR': 'The statement produced no resource',
                    'WARNING': 'The resource was generated but may be incomplete'
                }
            }
        }

        try:
            with open(self.log_file_path, 'w', encoding='utf-8') as f:
                json.dump(summary_data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            if self.logger:
                self.logger.error(f"Error writing manual review log: {e}")
            return None

        if self.logger:
            self.logger.info(f"Manual review log written to: {self.log_file_path}")
            self.logger.info(f"Total items requiring manual review: {len(self.review_items)}")
        return self.log_file_path

    def create_summary_report(self) -> str:
        """Create a human-readable summary report."""
        if not self.review_items:
            return "No manual review items found."

        report_lines = [
            "=" * 80,
            "MANUAL REVIEW REQUIRED - CONVERSION SUMMARY",
            "=" * 80,
            f"Total Items Requiring Review: {len(self.review_items)}",
            ""
        ]

        report_lines.extend([
            "BY SEVERITY:",
            *[f"  {severity}: {count} items" for severity, count in self._create_summary_by_severity().items()],
            ""
        ])
        report_lines.extend([
            "BY ISSUE TYPE:",
            *[f"  {issue_type}: {count} items" for issue_type, count in self._create_summary_by_type().items()],
            ""
        ])
        report_lines.extend([
            "BY FILE:",
            *[f"  {file_path}: {count} items" for file_path, count in self._create_summary_by_file().items()],
            ""
        ])

        errors = [item for item in self.review_items if item['severity'] == 'ERROR']
        if errors:
            report_lines.extend([
                "NOT CONVERTED (ERRORS):",
                *[f"  - {item['file_path']}::{item['object_name']} - {item['message']}" for item in errors],
                ""
            ])

        if self.log_file_path:
            report_lines.append(f"Detailed log available at: {self.log_file_path}")
        report_lines.append("=" * 80)
        return "\n".join(report_lines)

    def _create_summary_by_type(self) -> Dict[str, int]:
        summary = {}
        for item in self.review_items:
            summary[item['issue_type']] = summary.get(item['issue_type'], 0) + 1
        return dict(sorted(summary.items(), key=lambda x: x[1], reverse=True))

    def _create_summary_by_severity(self) -> Dict[str, int]:
        summary = {}
        for item in self.review_items:
            summary[item['severity']] = summary.get(item['severity'], 0) + 1
        return summary

    def _create_summary_by_file(self) -> Dict[str, int]:
        summary = {}
        for item in self.review_items:
            summary[item['file_path']] = summary.get(item['file_path'], 0) + 1
        return dict(sorted(summary.items(), key=lambda x: x[1], reverse=True))
