"""Workout physiological analytics engine.

Turns second-by-second activity streams into zone distributions and
training-stress metrics, tracks the ATL/CTL/TSB load model, and promotes
athlete zones when several workouts corroborate a fitness breakthrough.
"""

__version__ = "0.1.0"
