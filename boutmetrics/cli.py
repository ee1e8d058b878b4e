"""
Command line interface for BoutMetrics.

Example:
    python main.py /data/sleep-box/09-18-23 \\
        --cohort wild-type=M1,M2,M3 --cohort mutant=M4,M5

Without --cohort the discovered animal IDs are listed and cohort members
are asked for interactively.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import config as app_config
from .analysis import SleepBoutAnalyzer
from .binning import TWO_SECOND_EDGES
from .cohorts import DEFAULT_COHORT_LABELS, CohortAssignment, prompt_for_cohorts
from .config import AnalysisConfig, load_analysis_config, parse_edges
from .errors import ConfigurationError, EmptyCohortError
from .version_info import VERSION_STRING


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='boutmetrics',
        description='Compile sleep bout durations by genotype.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('folder', nargs='?', default=None,
                        help='Folder with *SB_2sec_*.csv files (default: last used folder)')
    parser.add_argument('--cohort', action='append', default=[], metavar='LABEL=ID,ID',
                        help='Cohort members; repeat for each cohort')
    parser.add_argument('--labels', default=None,
                        help='Comma-separated cohort labels to prompt for '
                             f'(default: last used labels, else {",".join(DEFAULT_COHORT_LABELS)})')
    parser.add_argument('--config', default=None, help='JSON file with analysis options')
    edges = parser.add_mutually_exclusive_group()
    edges.add_argument('--edges', default=None,
                       help='Comma-separated bin edges in seconds, e.g. 0,4,8,16,inf')
    edges.add_argument('--two-second-edges', action='store_true',
                       help='Use the 2,4,8,...,512,inf ladder (drops bouts under 2 s)')
    parser.add_argument('--timestamp-format', default=None,
                        help="strptime format of the timestamp column (default: '%%Y-%%m-%%d %%H:%%M:%%S')")
    parser.add_argument('--output-dir', default=None,
                        help='Output folder (default: <folder>/compiled_plots)')
    parser.add_argument('--no-excel', action='store_true', help='Skip the Excel workbook')
    parser.add_argument('--no-figures', action='store_true', help='Skip figures')
    parser.add_argument('--workers', type=int, default=None, help='Parallel workers for classification')
    parser.add_argument('--quiet', action='store_true', help='Only print errors')
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION_STRING}')
    return parser


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    """Analysis options from --config plus command line overrides."""
    config = load_analysis_config(args.config) if args.config else AnalysisConfig()

    if args.edges:
        config.bin_edges = parse_edges(args.edges)
        config.bin_labels = None
    elif args.two_second_edges:
        config.bin_edges = list(TWO_SECOND_EDGES)
        config.bin_labels = None

    if args.timestamp_format:
        config.timestamp_format = args.timestamp_format

    config.validate()
    return config


def main(argv: Optional[List[str]] = None, input_func=input) -> int:
    """
    Run the command line tool.

    Returns:
        0 on success, 1 if no input files were found, 2 on configuration errors
    """
    args = build_parser().parse_args(argv)

    def say(message: str = ""):
        if not args.quiet:
            print(message)

    folder = args.folder or app_config.get_last_input_folder()
    if not folder:
        print("ERROR: No input folder given")
        return 2
    folder = Path(folder)

    try:
        config = build_config(args)
        analyzer = SleepBoutAnalyzer(config, max_workers=args.workers, verbose=not args.quiet)

        animals = analyzer.data_loader.discover_animals(folder)
        if not animals:
            print(f"ERROR: No CSV files matching {config.file_pattern} found in {folder}")
            return 1

        if args.cohort:
            cohorts = CohortAssignment.from_args(args.cohort)
        else:
            if args.labels:
                labels = [l.strip() for l in args.labels.split(',') if l.strip()]
            else:
                labels = app_config.get_last_cohort_labels() or list(DEFAULT_COHORT_LABELS)
            cohorts = prompt_for_cohorts(list(animals), labels, input_func=input_func)

        cohorts.validate()
        say(f"Processing will begin with: {cohorts.to_description()}")

        result = analyzer.analyze_folder(folder, cohorts)
    except (ConfigurationError, EmptyCohortError) as e:
        print(f"ERROR: {e}")
        return 2

    app_config.set_last_input_folder(str(folder.resolve()))
    app_config.set_last_cohort_labels(cohorts.labels)

    output_dir = Path(args.output_dir) if args.output_dir else folder / 'compiled_plots'

    if not args.no_excel:
        from .data_exporter import DataExporter

        say("Writing Excel workbook...")
        workbook = DataExporter().export_workbook(result, output_dir)
        say(f"Excel file created: {workbook}")

    if not args.no_figures:
        from .figure_generator import FigureGenerator

        say("Creating figures...")
        saved = FigureGenerator().save_all(result, output_dir)
        say(f"{len(saved)} figure files saved to {output_dir}")

    say("Analysis complete!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
