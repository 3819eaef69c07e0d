from ib import create_population, run
from ib.patterns import render_target_pattern
from ib.types import RunConfig
from ib.utils import save_png

import os
import logging
import argparse
import random
import time

from dotenv import load_dotenv
from rich import print

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Evolve a small image toward a target pattern with a genetic algorithm.')
    parser.add_argument('-t', '--target', default=os.getenv('IB_TARGET', 'gradient'),
                        help='gradient, circle, checkerboard, stripes (or 1-4)')
    parser.add_argument('-p', '--population_size', default=os.getenv('IB_POPULATION_SIZE', 200))
    parser.add_argument('-mr', '--mutation_rate', default=os.getenv('IB_MUTATION_RATE', 0.03))
    parser.add_argument('-ms', '--mutation_strength', default=os.getenv('IB_MUTATION_STRENGTH', 25))
    parser.add_argument('-cr', '--crossover_rate', default=os.getenv('IB_CROSSOVER_RATE', 0.6))
    parser.add_argument('-g', '--max_generations', default=os.getenv('IB_MAX_GENERATIONS', 5000))
    parser.add_argument('-f', '--target_fitness', default=os.getenv('IB_TARGET_FITNESS', 0.96))
    parser.add_argument('-c', '--checkpoint_interval', default=os.getenv('IB_CHECKPOINT_INTERVAL', 500))
    parser.add_argument('-o', '--output_dir', default=os.getenv('IB_OUTPUT_DIR', '.'))
    parser.add_argument('-s', '--seed', default=os.getenv('IB_SEED'))
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def main(argv=None) -> int:
    load_dotenv() # load environment variables

    args = vars(build_parser().parse_args(argv))

    logging.basicConfig(format='%(asctime)s - %(levelname)s - %(message)s',
                        level=logging.DEBUG if args['verbose'] else logging.INFO)

    config = RunConfig(
        population_size=int(args['population_size']),
        mutation_rate=float(args['mutation_rate']),
        mutation_strength=int(args['mutation_strength']),
        crossover_rate=float(args['crossover_rate']),
        max_generations=int(args['max_generations']),
        target_fitness=float(args['target_fitness']),
        checkpoint_interval=int(args['checkpoint_interval']),
    )
    output_dir = args['output_dir']

    # time-derived unless pinned, logged so a run can be replayed
    seed = int(args['seed']) if args['seed'] is not None else time.time_ns()
    logger.info(f'Random seed: {seed}')
    rng = random.Random(seed)

    logger.info(f'Creating the target image...')
    target = render_target_pattern(args['target'], config.width, config.height)
    target_path = os.path.join(output_dir, 'target_image.png')
    written, not_saved = [], []
    if save_png(target.to_raster(), target.width, target.height, target_path):
        written.append(target_path)
    else:
        not_saved.append(target_path)

    logger.info(f'Creating the population...')
    p = create_population(config, target, rng)

    logger.info(f'Starting the genetic algorithm...')
    run(p, rng, output_dir=output_dir)
    written.extend(p.checkpoints)
    not_saved.extend(p.failed_checkpoints)

    final_path = os.path.join(output_dir, 'best_final.png')
    if save_png(p.best.to_raster(), config.width, config.height, final_path):
        written.append(final_path)
    else:
        not_saved.append(final_path)

    print("=" * 60)
    print("[bold]EVOLUTION COMPLETE![/bold]")
    print("=" * 60)
    print(f"Target pattern: {p.pattern}")
    print(f"Generations: {p.generation}")
    print(f"Best fitness achieved: {p.best.fitness:.4f}")
    print(f"Similarity to target: {p.best.fitness * 100:.2f}%")
    print("Files created:")
    for path in written:
        print(f"  {path}")
    if not_saved:
        print("[red]Not saved:[/red]")
        for path in not_saved:
            print(f"  {path}")

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
