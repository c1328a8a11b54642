"""Core modules for SETT Pro.

- settings: tolerances, run inputs and solver settings
- fluids: ideal-gas and CoolProp working-fluid models
- config: JSON run configuration and results persistence (JSON + HDF5)
"""
