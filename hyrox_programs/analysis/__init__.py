"""Analysis and program generation modules."""

from .athlete_profiler import AthleteProfileInput, HyroxAthleteProfile, analyze_profile
from .program_generator import ProgramGenerator, ProgramParams, generate_program
from .periodization import ProgramParamsError
from .templates import ProgramGenerationError, TemplateError

__all__ = [
    "AthleteProfileInput",
    "HyroxAthleteProfile",
    "analyze_profile",
    "ProgramGenerator",
    "ProgramParams",
    "generate_program",
    "ProgramParamsError",
    "ProgramGenerationError",
    "TemplateError",
]
