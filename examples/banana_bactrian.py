"""
Example: sampling a banana-shaped distribution with self-tuning Bactrian
random walk operators on two separate parameters.
"""

import numpy as np
import matplotlib.pyplot as plt

from mcstate.core.parameter import RealParameter
from mcstate.core.reference import Component, Reference
from mcstate.core.schedule import OperatorSchedule
from mcstate.core.state import State
from mcstate.operators.random_walk import BactrianRandomWalkOperator
from mcstate.samplers.single_chain import MCMCSampler


class BananaDistribution(Component):
    """
    Banana-shaped log density over two scalar parameters.

    Parameters:
        a: Controls the curvature of the banana shape.
        b: Controls the variance in the y direction.
    """

    def __init__(self, x: RealParameter, y: RealParameter, a: float = 1.0, b: float = 1.0):
        self.x = Reference("x", x, required=True)
        self.y = Reference("y", y, required=True)
        self.a = a
        self.b = b

    def __call__(self, state: State) -> float:
        x = self.x.resolve().get_value()
        y = self.y.resolve().get_value()

        # Transform y to straighten out the banana
        y_transformed = y - self.b * (x**2 - self.a)
        return -0.5 * (x**2 + y_transformed**2)


if __name__ == "__main__":
    np.random.seed(0)

    x = RealParameter("x", 0.0, lower=-10.0, upper=10.0)
    y = RealParameter("y", 0.0, lower=-10.0, upper=20.0)
    state = State([x, y])

    schedule = OperatorSchedule(
        [
            BactrianRandomWalkOperator(parameter=x, window_size=0.1, id="walk.x"),
            BactrianRandomWalkOperator(parameter=y, window_size=0.1, id="walk.y"),
        ],
        auto_optimize_delay=500,
    )

    sampler = MCMCSampler(state, BananaDistribution(x, y), schedule, n_iterations=50000, print_iteration=10000, save_iteration=10)
    acceptance_rate = sampler.run()
    print(f"Acceptance rate: {acceptance_rate:.3f}")

    for operator in schedule.operators:
        print(f"{operator.get_id()}: window size {operator.get_coercable_parameter_value():.3f}")

    samples = np.array([[s.get_state_node("x").get_value(), s.get_state_node("y").get_value()] for s in sampler.samples])

    fig, axes = plt.subplots(1, 2, figsize=(10, 4))
    axes[0].scatter(samples[:, 0], samples[:, 1], s=1, alpha=0.3)
    axes[0].set_xlabel("x")
    axes[0].set_ylabel("y")
    axes[0].set_title("Samples")
    axes[1].plot(sampler.trace)
    axes[1].set_xlabel("Iteration")
    axes[1].set_ylabel("Log probability")
    axes[1].set_title("Trace")
    plt.tight_layout()
    plt.show()
