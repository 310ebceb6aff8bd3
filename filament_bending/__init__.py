"""Minimum bending energy shape of a clamped filament with a fixed end."""

from filament_bending.curve_model import (ArcLengthPartition, CurveModel,
                                          BoundaryParameters,
                                          InputValidationError,
                                          arc_length_partition)
from filament_bending.bending_optimization import (SolverOptions, SolveStatus,
                                                   SolveResult, BendingCurve,
                                                   bending_energy,
                                                   boundary_residuals,
                                                   initial_guess, optimize,
                                                   reconstruct_coordinates,
                                                   solve_bending_problem,
                                                   generate_bending_curve)
from filament_bending.friction_cone import (FrictionStatus, FrictionResult,
                                            compute_cof)
from filament_bending.logging_config import setup_logging

__version__ = '0.1.0'
