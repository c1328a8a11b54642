"""SETT Pro: Stirling Engine Thermodynamic Tool.

Cyclic steady-state analysis of Stirling engines: state equations,
flow-direction resolution, cycle integration and the nested
steady-state / thermal-balance loops.
"""

__app_name__ = "SETT Pro"
__version__ = "0.1.0"
