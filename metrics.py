from prometheus_client import Counter, Gauge, REGISTRY


class SimulationMetrics:
    def __init__(self, simulation, registry=REGISTRY):
        self.metric_simulation_uptime_seconds = Counter('organisms_running_seconds', 'Time the simulation has been running in seconds', registry=registry)
        self.metric_simulated_seconds = Counter('organisms_simulated_seconds', 'Simulated time advanced by tick()', registry=registry)
        self.metric_food_eaten = Counter('organisms_food_eaten', 'Food items eaten by organisms', registry=registry)
        self.metric_bot_hits = Counter('organisms_bot_hits', 'Ticks an organism spent inside a bot bite radius', registry=registry)
        self.metric_current_generation_number = Gauge('organisms_current_generation_number', 'Current generation number in the simulation', registry=registry)
        self.metric_epoch_progress = Gauge('organisms_epoch_progress_ratio', 'Fraction of the current epoch already simulated', registry=registry)
        self.metric_best_organism_energy = Gauge('organisms_best_organism_energy', 'Energy of the best organism alive', registry=registry)
        self.metric_average_organism_energy = Gauge('organisms_average_organism_energy', 'Average energy of the living generation', registry=registry)
        self.metric_average_bot_energy = Gauge('organisms_average_bot_energy', 'Average bot energy in the current epoch', registry=registry)
        self.metric_last_generation_best_energy = Gauge('organisms_last_generation_best_energy', 'Best energy of the last completed generation', registry=registry)
        self.metric_last_generation_average_energy = Gauge('organisms_last_generation_average_energy', 'Average energy of the last completed generation', registry=registry)
        self.metric_current_organism_count = Gauge('organisms_current_organism_count', 'Current number of organisms in the simulation', registry=registry)
        self.metric_current_bot_count = Gauge('organisms_current_bot_count', 'Current number of bots in the simulation', registry=registry)
        self.metric_current_food_count = Gauge('organisms_current_food_count', 'Current number of food items in the simulation', registry=registry)
        self.metric_current_species_count = Gauge('organisms_current_species_count', 'Number of species found at the last evolution', registry=registry)
        self.metric_hall_of_fame_score = Gauge('organisms_hall_of_fame_score', 'All-time best generation score of the run', registry=registry)
        self.metric_brain_topology_input_size = Gauge('organisms_brain_topology_input_size', 'Input size of the organism brain', registry=registry)
        self.metric_brain_topology_hidden_size = Gauge('organisms_brain_topology_hidden_size', 'Hidden layer size of the organism brain', registry=registry)
        self.metric_brain_topology_output_size = Gauge('organisms_brain_topology_output_size', 'Output size of the organism brain', registry=registry)

        self._food_eaten_seen = simulation.food_eaten
        self._bot_hits_seen = simulation.bot_hits
        self.metric_simulation_uptime_seconds.inc(0)
        self.metric_hall_of_fame_score.set(0)
        input_size, hidden_size, output_size = simulation.shape
        self.metric_brain_topology_input_size.set(input_size)
        self.metric_brain_topology_hidden_size.set(hidden_size)
        self.metric_brain_topology_output_size.set(output_size)
        self.update(simulation, 0.0)

    def update(self, simulation, dt, hall_of_fame=None, simulated_dt=0.0):
        organisms = simulation.organisms
        bots = simulation.bots
        best = simulation.best_organism
        self.metric_simulation_uptime_seconds.inc(dt)
        self.metric_simulated_seconds.inc(simulated_dt)
        self.metric_food_eaten.inc(max(0, simulation.food_eaten - self._food_eaten_seen))
        self.metric_bot_hits.inc(max(0, simulation.bot_hits - self._bot_hits_seen))
        self._food_eaten_seen = simulation.food_eaten
        self._bot_hits_seen = simulation.bot_hits

        self.metric_current_generation_number.set(simulation.generation)
        self.metric_epoch_progress.set(min(1.0, simulation.time / simulation.config.evolution_time))
        self.metric_best_organism_energy.set(best.energy if best else 0)
        self.metric_average_organism_energy.set(sum(o.energy for o in organisms) / len(organisms) if organisms else 0)
        self.metric_average_bot_energy.set(sum(b.energy for b in bots) / len(bots) if bots else 0)
        if simulation.scores:
            self.metric_last_generation_best_energy.set(simulation.scores[-1].best_energy)
            self.metric_last_generation_average_energy.set(simulation.scores[-1].average_energy)
        self.metric_current_organism_count.set(len(organisms))
        self.metric_current_bot_count.set(len(bots))
        self.metric_current_food_count.set(len(simulation.food))
        self.metric_current_species_count.set(len(simulation.species))
        if hall_of_fame is not None:
            self.metric_hall_of_fame_score.set(max(0, hall_of_fame.score))
