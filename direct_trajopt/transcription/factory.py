"""Select a transcription scheme by name."""

from direct_trajopt.config import SCHEME_NAMES, SolverConfig, UnknownTranscriptionSchemeError
from direct_trajopt.problem import Problem
from direct_trajopt.transcription.base import Transcription
from direct_trajopt.transcription.hermite_simpson import HermiteSimpsonTranscription
from direct_trajopt.transcription.trapezoidal import TrapezoidalTranscription

TRANSCRIPTION_SCHEMES = dict(zip(SCHEME_NAMES, (TrapezoidalTranscription, HermiteSimpsonTranscription)))


def create_transcription(problem: Problem, config: SolverConfig = None) -> Transcription:
    """Create the transcription named by config.transcription_scheme."""
    config = config or SolverConfig()
    if config.transcription_scheme not in TRANSCRIPTION_SCHEMES:
        raise UnknownTranscriptionSchemeError(f"Unknown transcription scheme '{config.transcription_scheme}'.")
    return TRANSCRIPTION_SCHEMES[config.transcription_scheme](problem, config)
