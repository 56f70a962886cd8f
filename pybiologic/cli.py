"""
Command line entry point.

Runs the complete deterministic analysis of the AND-NOT classifier and writes
the result tables (CSV) and figures (PNG) to an output directory.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .analysis import format_report, format_truth_table, export_tables, run_full_analysis
from .circuits import CROSSTALK_PARAMETER, LEAK_PARAMETER, load_circuit
from .config import OperatingConfig
from .core.exceptions import PyBiologicError

logger = logging.getLogger(__name__)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pybiologic",
        description="Deterministic analysis of the (miR21 AND miR155) AND NOT miR34 molecular classifier")
    parser.add_argument('-m', '--model',
                        help='Reaction network as JSON or YAML. Defaults to the built-in gate design.')
    parser.add_argument('-c', '--config', help='Operating configuration YAML file')
    parser.add_argument('-o', '--output-dir', default='results',
                        help='Directory for CSV tables and figures (default: %(default)s)')
    parser.add_argument('-j', '--n-jobs', type=int, default=None,
                        help='Number of joblib workers for the sweeps (-1 uses all cores)')
    parser.add_argument('--conc-high', type=float, default=None,
                        help='Concentration representing logical 1 [M]')
    parser.add_argument('--stop-time', type=float, default=None,
                        help='Default simulation horizon [s]')
    parser.add_argument('--no-plots', action='store_true', help='Do not render figures')
    parser.add_argument('--skip-robustness', action='store_true',
                        help='Skip the leak and crosstalk stress tests')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every scenario')
    return parser


def _save_plots(results, config: OperatingConfig, output_dir: Path):
    import matplotlib
    matplotlib.use('Agg')
    from .visualization import plot_dose_response, plot_response, plot_robustness, plot_truth_table

    plot_truth_table(results.truth_table, save_path=output_dir / "biocomputer_truth_table.png")
    trajectory = results.dynamics.trajectory
    plot_response(trajectory.t, trajectory[config.signal_species], results.report.t50, results.report.t90,
                  save_path=output_dir / "biocomputer_response.png")
    plot_dose_response(results.ec50_table, "Input concentration miR21/miR155 [nM]",
                       "Biocomputer sensitivity curve (EC50)", half_max=results.report.ec50,
                       save_path=output_dir / "biocomputer_sensitivity.png")
    plot_dose_response(results.ic50_table, "Inhibitor concentration miR34 [nM]",
                       "Biocomputer inhibition curve (IC50)", half_max=results.report.ic50, fmt='r-s',
                       save_path=output_dir / "biocomputer_inhibition_IC50.png")
    if results.leak_table is not None:
        plot_robustness(results.leak_table, LEAK_PARAMETER,
                        save_path=output_dir / "biocomputer_robustness_LEAK.png")
    if results.crosstalk_table is not None:
        plot_robustness(results.crosstalk_table, CROSSTALK_PARAMETER,
                        save_path=output_dir / "biocomputer_robustness_CROSSTALK.png")


def main(argv: Optional[List[str]] = None) -> int:
    args = get_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = OperatingConfig.from_yaml(args.config) if args.config else OperatingConfig()
        config = config.with_overrides(n_jobs=args.n_jobs, conc_high=args.conc_high, stop_time=args.stop_time)
        model = load_circuit(args.model, signal_species=config.signal_species)
        logger.info("Loaded %r", model)

        results = run_full_analysis(model, config, include_robustness=not args.skip_robustness)
    except PyBiologicError as e:
        logger.error("%s", e)
        return 1

    logger.info("Truth table:\n%s", format_truth_table(results.truth_table))
    logger.info("Derived metrics:\n%s", format_report(results.report))

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    export_tables(results.tables(), output_dir)
    if not args.no_plots:
        _save_plots(results, config, output_dir)
    return 0


if __name__ == '__main__':
    sys.exit(main())
