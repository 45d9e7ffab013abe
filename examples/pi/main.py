"""
Monte Carlo Estimation of PI using the piload engine

This example runs a short tiered load on every physical core and compares
the estimate with the real value of PI.
"""

import math

from piload import ExecutorKind, LoadRunner, RunConfig, get_core_count


def main():
    """Run a tiered Monte Carlo PI estimation on all cores."""

    print("=" * 60)
    print("Monte Carlo Estimation of PI using piload")
    print("=" * 60)

    # Configuration
    config = RunConfig(
        thread_count=get_core_count(),
        runtime_seconds=5,
        tiered_runtime=True,
        mode="tpl45",
        executor=ExecutorKind.PROCESS,
    )
    runner = LoadRunner(config)

    print(f"\nConfiguration:")
    print(f"  Threads: {config.thread_count}")
    print(f"  Schedule: {runner.schedule}")
    print(f"\nRunning Monte Carlo simulation...")

    report = runner.run()

    error = abs(report.pi_estimate - math.pi)
    error_percent = (error / math.pi) * 100

    print(f"\nResults:")
    print(f"  Estimated PI: {report.pi_estimate:.10f}")
    print(f"  Actual PI:    {math.pi:.10f}")
    print(f"  Error:        {error:.10f} ({error_percent:.6f}%)")
    print(f"  Iterations:   {report.total_iterations:,}")
    print("=" * 60)


if __name__ == "__main__":
    main()
