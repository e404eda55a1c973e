"""
Designite / Churn Mapper

Joins a Designite smell dataset with a churn/refactoring dataset into one
table keyed by (commit_id, file_path).

Usage:
    churnmap designite.csv churn.csv out/mapped.csv
    churnmap designite.csv churn.csv out/mapped.csv --report out/report.json --verbose
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

from .config import Config
from .utils.logging_utils import setup_logger, get_logger, ROOT_LOGGER_NAME
from .utils.file_utils import load_records, write_rows, save_json
from .join import ColumnReconciler, JoinEngine, JoinStats, KeyResolver, MissingColumnsError
from .verifiers import JoinChecker

logger = get_logger(__name__)


@dataclass
class MappingResult:
    header: List[str]
    rows: List[List[str]]
    stats: JoinStats
    output_path: Path
    report: Dict[str, Any] = field(default_factory=dict)


class ChurnMapper:
    """
    Orchestrates load → resolve → join → reconcile → write → verify.

    Example:
        >>> mapper = ChurnMapper()
        >>> result = mapper.run("designite.csv", "churn.csv", "out/mapped.csv")
        >>> len(result.rows)
        42
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the mapper.

        Args:
            config: Loaded configuration (defaults are used if omitted)
        """
        self.config = config or Config()

    def run(self, designite_csv, churn_csv, output_csv, report_path=None) -> MappingResult:
        """
        Map one Designite CSV onto one churn CSV and write the result.

        Args:
            designite_csv: Path to the Designite CSV
            churn_csv: Path to the churn CSV
            output_csv: Path of the merged CSV to write
            report_path: Where to save the join report (overrides config)

        Returns:
            MappingResult

        Raises:
            MissingColumnsError: If required key columns are missing
        """
        encoding = self.config.get('input.encoding', 'utf-8')

        logger.info("=" * 60)
        logger.info("Loading inputs")
        designite = load_records(designite_csv, encoding=encoding)
        churn = load_records(churn_csv, encoding=encoding)

        columns = KeyResolver(config=self.config.get_section('columns')).resolve(designite, churn)

        logger.info("Joining")
        engine = JoinEngine(columns)
        pairs = engine.join(designite, churn)

        reconciler = ColumnReconciler(columns, config={
            'clash_suffix': self.config.get('output.clash_suffix'),
            'designite_suffix': self.config.get('output.designite_suffix'),
            'designite_drop': self.config.get('columns.designite.drop'),
            'churn_drop': self.config.get('columns.churn.drop'),
        })
        header = reconciler.build_header(designite, churn)
        table = reconciler.materialize(pairs, header)

        output_path = write_rows(
            table.header,
            table.rows,
            output_csv,
            encoding=self.config.get('output.encoding', 'utf-8'),
            quote_all=self.config.get('output.quote_all', True),
        )

        checker = JoinChecker(config={'min_match_rate': self.config.get('report.min_match_rate')})
        report = checker.verify(table, engine.stats)

        report_path = report_path or self.config.get('report.path')
        if report_path:
            save_json(report, report_path)

        return MappingResult(
            header=table.header,
            rows=table.rows,
            stats=engine.stats,
            output_path=output_path,
            report=report,
        )


def configure_logging(config: Config, verbose: bool = False) -> None:
    log_config = config.get_section('logging')
    file_config = log_config.get('file', {}) or {}

    setup_logger(
        ROOT_LOGGER_NAME,
        log_file=file_config.get('path') if file_config.get('enabled') else None,
        level='DEBUG' if verbose else log_config.get('level', 'INFO'),
        colorize=log_config.get('colorize', True),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Usage:
        churnmap <designite.csv> <churn.csv> <out.csv> [--config PATH] [--report PATH] [--verbose]
    """
    parser = argparse.ArgumentParser(
        prog='churnmap',
        description="Join Designite metrics with churn metrics per (commit, file)",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('designite_csv', help='Designite CSV (child_commit_id, file_path, ...)')
    parser.add_argument('churn_csv', help='Churn CSV (child_commit, new_path, old_path, ...)')
    parser.add_argument('output_csv', help='Merged CSV to write')

    parser.add_argument(
        '--config',
        help='Path to config file (default: config/mapper_config.yaml if present)'
    )

    parser.add_argument(
        '--report',
        help='Write the join check report as JSON to this path'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    config = Config(config_file=args.config)
    configure_logging(config, verbose=args.verbose)

    try:
        result = ChurnMapper(config).run(
            args.designite_csv, args.churn_csv, args.output_csv, report_path=args.report
        )
    except MissingColumnsError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Mapped rows: {len(result.rows)}")
    print(f"Wrote: {result.output_path.resolve()}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
