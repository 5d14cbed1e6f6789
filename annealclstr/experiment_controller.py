"""
Experimental control module for annealing runs.

This module provides a single entry point that loads a table, clusters it by
simulated annealing, and writes the assignment file, an Excel report and
cluster plots.
"""

import os
import time
import warnings
import xlsxwriter
from typing import Any, Dict, List, Optional
from .annealer import AnnealerConfig, ClusterAnnealer
from .clusterer import read_table, write_assignment, create_cluster_list, Cluster
from .plotting import save_cluster_plots


def experiment_controller(file_path: str, config: AnnealerConfig, sep: str = ',', output_path: Optional[str] = None,
                          normalize: bool = True, save_plots: bool = False, output_dir: Optional[str] = None,
                          excel_report: bool = True, note: str = '') -> Dict[str, Any]:
    """
    Run an annealing clustering experiment with reporting.

    Parameters
    ----------
    file_path : str
        Path to the delimited input table. See ``read_table`` for the format.
    config : AnnealerConfig
        Number of clusters, starting temperature, cooling factor, iteration
        budget and seed.
    sep : str, default=','
        Column delimiter of the input table, also used for the assignment file.
    output_path : Optional[str], default=None
        Path of the cluster assignment file. If None, it is written to
        ``output_dir`` as 'anneal-k{n_clusters}-{note}.csv'.
    normalize : bool, default=True
        Min-max normalize every row before annealing.
    save_plots : bool, default=False
        Whether to save one PNG line chart per cluster.
    output_dir : Optional[str], default=None
        Directory for the report, plots and default assignment file. If None,
        creates 'output' directory in the package root.
    excel_report : bool, default=True
        Whether to write an Excel summary of the run.
    note : str, default=''
        Additional note appended to output file names.

    Returns
    -------
    Dict[str, Any]
        - ``annealer``: The finished ClusterAnnealer
        - ``cluster_list``: List of Cluster objects
        - ``iterations``: Number of iterations executed
        - ``snapshot``: Final AnnealingSnapshot
        - ``run_time``: Annealing time in seconds
        - ``total_time``: Total experiment time including I/O in seconds
        - ``assignment_file``: Path of the written assignment file
        - ``output_file``: Path of the Excel report (None if not written)
        - ``plot_files``: Paths of the cluster plots (None if not written)
    """
    very_begin_time = time.time()

    labels, data = read_table(file_path, sep=sep)

    begin_time = time.time()
    try:
        annealer = ClusterAnnealer(labels, data, config)
        if normalize:
            annealer.normalize()
        initial_snapshot = annealer.report()
        iterations = annealer.run(config.max_iter)
    except Exception as e:
        raise RuntimeError(f"Clustering failed: {e}")
    run_time = time.time() - begin_time

    snapshot = annealer.report()
    cluster_list = create_cluster_list(annealer)

    # Determine output directory
    if output_dir is None:
        script_dir = os.path.dirname(os.path.abspath(__file__))
        output_dir = os.path.join(script_dir, '..', 'output')

    os.makedirs(output_dir, exist_ok=True)

    base_name = f'anneal-k{config.n_clusters}-{note}'
    if output_path is None:
        output_path = os.path.join(output_dir, base_name + '.csv')
    write_assignment(output_path, annealer.labels, annealer.assignment, sep=sep)
    print(f"Cluster assignment saved to: {output_path}")

    output_file_path = None
    if excel_report:
        output_file_path = os.path.join(output_dir, base_name + '.xlsx')
        try:
            _write_excel_report(output_file_path, file_path, config, annealer, cluster_list, initial_snapshot, run_time)
            print(f"Excel report saved to: {output_file_path}")
        except Exception as e:
            warnings.warn(f"Failed to generate Excel report: {e}")
            output_file_path = None

    plot_files = None
    if save_plots:
        try:
            plot_files = save_cluster_plots(cluster_list, output_dir, prefix=base_name)
            print(f"Cluster plots saved to: {output_dir}")
        except Exception as e:
            warnings.warn(f"Failed to generate plots: {e}")
            plot_files = None

    total_time = time.time() - very_begin_time
    print(f'Total experiment time: {total_time:.2f} seconds')

    results = {
        'annealer': annealer,
        'cluster_list': cluster_list,
        'iterations': iterations,
        'snapshot': snapshot,
        'run_time': run_time,
        'total_time': total_time,
        'assignment_file': output_path,
        'output_file': output_file_path,
        'plot_files': plot_files
    }

    return results


def _write_excel_report(output_file_path: str, file_path: str, config: AnnealerConfig, annealer: ClusterAnnealer,
                        cluster_list: List[Cluster], initial_snapshot, run_time: float) -> None:
    w = xlsxwriter.Workbook(output_file_path)
    ws = w.add_worksheet('results')
    ws.set_column('A:A', 24)
    ws.set_column('B:B', 14)
    ws.set_column('C:C', 14)

    # Run settings
    ws.write(0, 0, 'File Path:')
    ws.write(0, 1, file_path)
    ws.write(1, 0, 'Number of clusters')
    ws.write(1, 1, config.n_clusters)
    ws.write(2, 0, 'Starting temperature')
    ws.write(2, 1, config.temperature)
    ws.write(3, 0, 'Cooling factor')
    ws.write(3, 1, config.cooling_factor)
    ws.write(4, 0, 'Iterations')
    ws.write(4, 1, annealer.iterations_)
    ws.write(5, 0, 'Seed')
    ws.write(5, 1, '' if config.seed is None else config.seed)
    ws.write(6, 0, "Time:")
    ws.write(6, 1, time.strftime("%H:%M %d/%m/%Y"))

    # Outcome
    final = annealer.report()
    ws.write(8, 0, 'Metric')
    ws.write(8, 1, 'Start')
    ws.write(8, 2, 'End')
    ws.write(9, 0, 'Total energy')
    ws.write(9, 1, initial_snapshot.total_energy)
    ws.write(9, 2, final.total_energy)
    ws.write(10, 0, 'Temperature')
    ws.write(10, 1, initial_snapshot.temperature)
    ws.write(10, 2, final.temperature)
    ws.write(11, 0, 'Accepted moves')
    ws.write(11, 2, annealer.accepted_)
    ws.write(12, 0, 'Rejected moves')
    ws.write(12, 2, annealer.rejected_)
    ws.write(13, 0, 'Run Time')
    ws.write(13, 2, run_time)

    # Cluster summary
    start_row = 15
    ws.write(start_row, 0, 'Cluster')
    ws.write(start_row, 1, 'Members')
    ws.write(start_row, 2, 'Energy')
    ws.write(start_row, 3, 'Representative')
    for offset, each_cluster in enumerate(cluster_list, start=1):
        ws.write(start_row + offset, 0, each_cluster.cluster_id)
        ws.write(start_row + offset, 1, each_cluster.number_of_members)
        ws.write(start_row + offset, 2, each_cluster.energy)
        ws.write(start_row + offset, 3, each_cluster.best_representative_member or '')

    ws_assign = w.add_worksheet('assignment')
    ws_assign.write(0, 0, 'Rowname')
    ws_assign.write(0, 1, 'Cluster')
    for idx, (label, cluster) in enumerate(zip(annealer.labels, annealer.assignment.tolist()), start=1):
        ws_assign.write(idx, 0, label)
        ws_assign.write(idx, 1, cluster + 1)

    w.close()
