from .base import Candidate, Representation, Route, Vector
from .permutation import PermutationRepresentation, ordered_crossover, reverse_segment
from .real_vector import RealVectorRepresentation, gaussian_mutation, swap_crossover

__all__ = [
    "Candidate",
    "Representation",
    "Route",
    "Vector",
    "PermutationRepresentation",
    "ordered_crossover",
    "reverse_segment",
    "RealVectorRepresentation",
    "gaussian_mutation",
    "swap_crossover",
]
