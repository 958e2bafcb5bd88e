"""HandField: continuous hand metrics driving a particle-field instrument."""

__version__ = "0.1.0"
