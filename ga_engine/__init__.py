"""
Generational genetic algorithm engine with pluggable selection, crossover and
mutation over real-vector and permutation encodings.
"""

__all__ = [
    "data",
    "errors",
    "evaluation",
    "evolutionary",
    "problems",
    "representations",
    "selection",
    "termination",
]
