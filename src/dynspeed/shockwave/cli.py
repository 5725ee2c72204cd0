"""CLI that generates shockwave speed-change events for a road graph."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from dynspeed.network.road_graph import RoadGraph

from .config import ShockwaveConfig
from .events import ChangeConnectionSpeedEvent, events_to_frame
from .generator import DynamicSpeedGenerator
from .traversal import ShockwaveResult

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--graph-csv",
        required=True,
        help="Edge list CSV with 'source', 'target' and optional 'length' columns.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional shockwave YAML configuration; built-in defaults otherwise.",
    )
    parser.add_argument("--seed", type=int, default=0, help="Root random seed.")
    parser.add_argument(
        "--scenario-length",
        type=int,
        default=24 * 60 * 60 * 1000,
        help="Scenario length in milliseconds.",
    )
    parser.add_argument(
        "--output-csv",
        default="shockwave_events.csv",
        help="Destination CSV for the speed-change events.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        graph = RoadGraph.from_csv(args.graph_csv)
        config = (
            ShockwaveConfig.from_yaml(args.config, graph=graph)
            if args.config
            else ShockwaveConfig()
        )
        generator = DynamicSpeedGenerator(graph, config)
        events = _generate_with_progress(
            generator.iter_shockwaves(args.seed, args.scenario_length)
        )
    except (FileNotFoundError, TypeError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc
    _write_events_csv(args.output_csv, events)
    logger.info("Wrote %d speed events to %s", len(events), args.output_csv)


def _generate_with_progress(
    shockwaves: Iterable[ShockwaveResult],
) -> List[ChangeConnectionSpeedEvent]:
    """Drain the shockwave iterator while showing a spinner."""

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} shockwaves"),
        TimeElapsedColumn(),
        transient=True,
    )
    events: List[ChangeConnectionSpeedEvent] = []
    with progress:
        task_id = progress.add_task("Propagating shockwaves", total=None)
        for result in shockwaves:
            events.extend(result.events)
            progress.advance(task_id)
    return events


def _write_events_csv(path: str | Path, events: Iterable[ChangeConnectionSpeedEvent]) -> None:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    events_to_frame(events).to_csv(output_path, index=False)


if __name__ == "__main__":
    main()
