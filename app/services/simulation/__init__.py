from app.services.simulation.engine import (
    PIPELINE,
    SWEEPABLE_PARAMETERS,
    TreatmentSimulator,
    simulate,
)

__all__ = ["PIPELINE", "SWEEPABLE_PARAMETERS", "TreatmentSimulator", "simulate"]
