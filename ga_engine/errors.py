class GAEngineError(Exception):
    """Base for all ga_engine exceptions."""

    pass


class ConfigurationError(GAEngineError, ValueError):
    """Invalid run, representation or operator parameters."""

    pass


class RepresentationMismatchError(GAEngineError, ValueError):
    """Candidates do not match the representation they are used with."""

    pass


class EvaluatorError(GAEngineError):
    """A fitness evaluator produced an unusable score."""

    pass
