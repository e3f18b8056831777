import argparse
import json
import logging
import os
import sys
import time

from prometheus_client import start_http_server

from brain import ModelWeights
from config import SimulationConfig, DEFAULT_TIME_STEP
from metrics import SimulationMetrics
from simulation import Simulation

SAVE_DIR = "saved_brains"

# =============================================================================
# CLASS: HallOfFame
# =============================================================================
class HallOfFame:
    """
    Best weights seen over the whole run.

    A generation's score is best energy times average energy, which rewards
    a champion only when the rest of its generation did well too.
    """
    def __init__(self):
        self.score = -1.0
        self.generation = None
        self.organism_id = None
        self.weights = None

    @staticmethod
    def generation_score(score):
        return score.best_energy * score.average_energy

    def record(self, snapshot):
        """on_evolve callback. Returns True when the record was beaten."""
        if not snapshot.scores or snapshot.champion is None:
            return False
        score = self.generation_score(snapshot.scores[-1])
        if score <= self.score:
            return False
        champion = snapshot.champion
        self.score = score
        self.generation = champion.generation
        self.organism_id = champion.id
        self.weights = champion.weights.copy()
        print(f"\nNew record! Gen {champion.generation}, Score: {score:.4f} ({champion.id})")
        return True


def save_weights(weights, filename, generation=None, score=None):
    os.makedirs(SAVE_DIR, exist_ok=True)
    data = weights.to_dict()
    if generation is not None: data["generation"] = generation
    if score is not None: data["score"] = score
    with open(os.path.join(SAVE_DIR, filename), 'w') as f: json.dump(data, f, indent=4, sort_keys=True)
    print(f"Brain saved to {filename}")


def load_weights(filename):
    filepath = os.path.join(SAVE_DIR, filename)
    if not os.path.exists(filepath): raise FileNotFoundError(f"Brain file not found at {filepath}")
    with open(filepath, 'r') as f: data = json.load(f)
    return ModelWeights.from_dict(data), data.get("generation", 0)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Headless organism evolution simulation')
    parser.add_argument('--organisms', type=int, default=SimulationConfig.max_organisms, help='Organisms per generation')
    parser.add_argument('--bots', type=int, default=SimulationConfig.max_bots, help='Predator bots')
    parser.add_argument('--food', type=int, default=SimulationConfig.max_food, help='Food items kept in the arena')
    parser.add_argument('--evolution-time', type=float, default=SimulationConfig.evolution_time, help='Simulated seconds per generation')
    parser.add_argument('--dt', type=float, default=DEFAULT_TIME_STEP, help='Simulated seconds per tick')
    parser.add_argument('--generations', type=int, default=200, help='Stop after this many generations (0 runs forever)')
    parser.add_argument('--elitism', type=int, default=SimulationConfig.elitism)
    parser.add_argument('--selection', choices=['tournament', 'elite_pair'], default=SimulationConfig.selection)
    parser.add_argument('--speciation', action='store_true', help='Cluster the population into species')
    parser.add_argument('--workers', type=int, default=SimulationConfig.workers, help='Threads for the per-agent phase')
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--brain', default='best_brain.json', help=f'Seed/save file inside {SAVE_DIR}/')
    parser.add_argument('--metrics-port', type=int, default=8000, help='Prometheus port (0 disables)')
    parser.add_argument('--log-level', default='WARNING')
    return parser.parse_args(argv)


def build_config(args):
    return SimulationConfig(
        max_organisms=args.organisms, max_bots=args.bots, max_food=args.food,
        evolution_time=args.evolution_time, elitism=args.elitism, selection=args.selection,
        speciation=args.speciation, workers=args.workers, seed=args.seed,
    )


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = build_config(args)

    try:
        initial_weights, start_gen = load_weights(args.brain)
        print(f"Seeding population from {args.brain} (Gen {start_gen}).")
    except FileNotFoundError:
        print("No saved brain found. Creating a new random population.")
        initial_weights = None

    hall_of_fame = HallOfFame()
    simulation = Simulation(config, initial_weights=initial_weights, on_evolve=hall_of_fame.record)
    if args.metrics_port: start_http_server(args.metrics_port)
    prometheus_metrics = SimulationMetrics(simulation)

    last_time = time.time()
    ticks_this_second = 0
    last_tps_report_time = time.time()

    print("Headless simulation starting... Press Ctrl+C to stop.")
    try:
        with simulation:
            while not args.generations or simulation.generation < args.generations:
                now = time.time()
                dt = now - last_time
                last_time = now

                generation = simulation.generation
                simulation.tick(args.dt)

                if simulation.generation != generation:
                    score = simulation.scores[-1]
                    print(f"\n--- Generation {score.generation} complete ---")
                    print(f"    Best energy: {score.best_energy:.4f}")
                    print(f"    Average energy: {score.average_energy:.4f}")
                    print(f"    Average bot energy: {score.average_bot_energy:.4f}")
                    print(f"    HoF score: {hall_of_fame.score:.4f}")

                prometheus_metrics.update(simulation, dt, hall_of_fame, args.dt)

                ticks_this_second += 1
                if now - last_tps_report_time >= 1.0:
                    tps = ticks_this_second
                    ticks_this_second = 0
                    last_tps_report_time = now
                    progress = min(1.0, simulation.time / config.evolution_time)
                    progress_bar = '#' * int(progress * 20)
                    progress_bar = progress_bar.ljust(20, '-')
                    best = simulation.best_organism
                    sys.stdout.write(f"\rGen {simulation.generation} [{progress_bar}] {int(progress*100)}% | TPS: {tps} | "
                                     f"Food: {len(simulation.food)} | Best: {best.energy if best else 0:.3f}   ")
                    sys.stdout.flush()

    except KeyboardInterrupt:
        print("\nSimulation stopped by user.")
    finally:
        print("\nSaving best brain from Hall of Fame on exit...")
        if hall_of_fame.weights is not None:
            save_weights(hall_of_fame.weights, args.brain, generation=hall_of_fame.generation, score=hall_of_fame.score)
        else:
            print("No organism in Hall of Fame to save.")
        print("Exiting.")


if __name__ == "__main__":
    main()
