"""
Script to run benchmarks and generate comparison reports.
"""
import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from typing import List
from .runner import BenchmarkRunner, BenchmarkResult
from ..strategies import STRATEGY_BY_KEY

logger = logging.getLogger(__name__)


def results_frame(results: List[BenchmarkResult]) -> pd.DataFrame:
    """Convert results to a DataFrame, one row per run."""
    return pd.DataFrame([asdict(r) for r in results])


def plot_results(results: List[BenchmarkResult], output_dir: Path):
    """Generate visualization plots of benchmark results."""
    if not results:
        logger.warning("No results to plot!")
        return

    df = results_frame(results)

    # Create plots directory
    plots_dir = output_dir / 'plots'
    plots_dir.mkdir(exist_ok=True)

    # Runtime comparison
    plt.figure(figsize=(10, 6))
    sns.barplot(data=df, x='case_name', y='runtime_seconds', hue='strategy')
    plt.title('Strategy Runtime Comparison')
    plt.xticks(rotation=45)
    plt.tight_layout()
    plt.savefig(plots_dir / 'runtime_comparison.png')
    plt.close()

    # Quality metrics
    fig, axes = plt.subplots(2, 2, figsize=(15, 15))
    fig.suptitle('Layout Quality Comparison')

    sns.barplot(data=df, x='case_name', y='utilization', hue='strategy', ax=axes[0, 0])
    axes[0, 0].set_title('Utilization (%)')
    axes[0, 0].tick_params(labelrotation=45)

    sns.barplot(data=df, x='case_name', y='efficiency', hue='strategy', ax=axes[0, 1])
    axes[0, 1].set_title('Efficiency')
    axes[0, 1].tick_params(labelrotation=45)

    sns.barplot(data=df, x='case_name', y='accessibility', hue='strategy', ax=axes[1, 0])
    axes[1, 0].set_title('Accessibility')
    axes[1, 0].tick_params(labelrotation=45)

    sns.barplot(data=df, x='case_name', y='gap_violations', hue='strategy', ax=axes[1, 1])
    axes[1, 1].set_title('Gap Violations')
    axes[1, 1].tick_params(labelrotation=45)

    plt.tight_layout()
    plt.savefig(plots_dir / 'quality_metrics.png')
    plt.close()

    # Save raw data
    df.to_csv(output_dir / 'benchmark_results.csv', index=False)

    # Generate summary stats
    summary = df.groupby(['case_name', 'strategy']).agg({
        'runtime_seconds': ['mean', 'std'],
        'utilization': 'mean',
        'efficiency': 'mean',
        'accessibility': 'mean',
        'overlap_area': 'max',
        'gap_violations': 'max',
    }).round(3)

    summary.to_csv(output_dir / 'summary_stats.csv')


def main():
    parser = argparse.ArgumentParser(description='Run layout strategy benchmarks')
    parser.add_argument('--output', type=str, default='benchmark_results',
                        help='Output directory for results')
    parser.add_argument('--runs', type=int, default=3,
                        help='Number of runs per case')
    parser.add_argument('--strategies', type=str, default=','.join(STRATEGY_BY_KEY),
                        help='Comma-separated strategy keys to run')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    # Create output directory
    output_dir = Path(args.output)
    output_dir.mkdir(exist_ok=True)

    strategies = [STRATEGY_BY_KEY[k.strip()] for k in args.strategies.split(',') if k.strip()]

    runner = BenchmarkRunner()
    results = runner.run_benchmark(strategies=strategies, runs_per_case=args.runs)

    # Generate plots and save results
    plot_results(results, output_dir)
    with open(output_dir / 'summary.json', 'w') as f:
        json.dump(runner.summarize(results), f, indent=2)

    logger.info(f"Benchmark results saved to {output_dir}")


if __name__ == '__main__':
    main()
