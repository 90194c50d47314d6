class SequenceRandom:
    """Stands in for random.Random, returning preset draws in order."""

    def __init__(self, *draws):
        self.draws = list(draws)

    def random(self):
        return self.draws.pop(0)


class FixedDistanceSimulator:
    """Sensor simulator that reports queued distances instead of random ones."""

    def __init__(self, *distances, initial=None):
        self.distances = list(distances)
        self.initial = initial
        self.calls = []

    def simulate_sensor_reading(self, tank_id, current_fuel_height, tank_height):
        self.calls.append((tank_id, current_fuel_height, tank_height))
        return self.distances.pop(0)

    def get_initial_fuel_level(self, tank_height):
        return self.initial
