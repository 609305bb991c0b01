"""
Class file for a single chain MCMC sampler.
"""

from typing import List, Sequence, Union

import numpy as np

from mcstate.core.model import ScoringProtocol, validate_log_probability
from mcstate.core.operator import Operator
from mcstate.core.reference import ReferenceHolder
from mcstate.core.schedule import OperatorSchedule
from mcstate.core.state import State
from mcstate.utils.logging import McstateLogger

logger = McstateLogger.get_logger(__name__)


class MCMCSampler:
    """
    Class for a single chain MCMC sampler.

    Each iteration stores the state, lets one operator change it, scores the
    result and either keeps it or restores the checkpoint. The operator is
    then told the log acceptance ratio so it can tune itself.

    Attributes:
        state (State): The state being sampled, changed in place.
        scoring (ScoringProtocol): Log probability of the active state.
        schedule (OperatorSchedule): Chooses the operator for each iteration.
        n_iterations (int): Number of iterations to run the sampler.
        print_iteration (int): Number of iterations between progress messages.
        save_iteration (int): Number of iterations between kept samples, 0 keeps none.
        trace (List[float]): Log probability after every iteration.
        samples (List[State]): Copies of the state taken every save_iteration iterations.
    """

    def __init__(self, state: State, scoring: ScoringProtocol, operators: Union[OperatorSchedule, Sequence[Operator]], n_iterations: int, print_iteration: int = 1000, save_iteration: int = 0):
        if n_iterations < 0:
            raise ValueError("n_iterations must be >= 0.")
        if print_iteration < 1:
            raise ValueError("print_iteration must be >= 1.")
        if save_iteration < 0:
            raise ValueError("save_iteration must be >= 0.")

        self.state = state
        self.scoring = scoring
        self.schedule = operators if isinstance(operators, OperatorSchedule) else OperatorSchedule(operators)
        self.n_iterations = n_iterations
        self.print_iteration = print_iteration
        self.save_iteration = save_iteration
        self.trace: List[float] = []
        self.samples: List[State] = []

        for operator in self.schedule.operators:
            self.state.connect(operator)
        if isinstance(scoring, ReferenceHolder):
            self.state.connect(scoring)

    def run(self) -> float:
        """
        Run the sampler for n_iterations.

        Returns:
        -------
            acceptance_rate (float): Fraction of accepted proposals.
        """
        self.state.set_dirty(True)
        current = validate_log_probability(self.scoring(self.state))
        self.state.set_dirty(False)
        if current == -np.inf:
            raise ValueError("The initial state has zero probability.")

        acceptance_count = 0
        for i in range(1, self.n_iterations + 1):
            self.state.store()

            operator = self.schedule.select_operator()
            log_hastings = operator.proposal()

            if log_hastings == -np.inf:
                # rejected outright, no need to score
                log_alpha = -np.inf
                accepted = False
            else:
                proposed = validate_log_probability(self.scoring(self.state))
                log_alpha = log_hastings + proposed - current
                accepted = log_alpha >= 0 or np.log(np.random.rand()) < log_alpha

            if accepted:
                current = proposed
                operator.accept()
                acceptance_count += 1
            else:
                self.state.restore()
                operator.reject()
            self.state.set_dirty(False)

            operator.optimize(log_alpha)
            self.trace.append(current)
            if self.save_iteration and i % self.save_iteration == 0:
                self.samples.append(self.state.copy())

            if i % self.print_iteration == 0:
                logger.info("Iteration %d/%d, log probability %.4f", i, self.n_iterations, current)

        if self.n_iterations > 0:
            self.schedule.log_statistics()
            return acceptance_count / self.n_iterations
        return 0.0
