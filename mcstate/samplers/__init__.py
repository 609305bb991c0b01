from mcstate.samplers.single_chain import MCMCSampler

__all__ = [
    "MCMCSampler",
]
