from dampolicy.metrics.objectives import ObjectiveCalculator
