# oscillator_core/errors.py


class ConfigError(ValueError):
    """
    Raised when an OscillatorConfig cannot define the dynamics matrix
    A = M^-1 K (non-positive mass, negative or non-finite parameter).
    """
