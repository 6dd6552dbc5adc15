"""
Pipeline runner for the flight delay report.

Chains ingestion, cleaning, feature building and splitting.
"""

from .run_pipeline import FlightDelayPipeline, PipelineResult

__all__ = [
    "FlightDelayPipeline",
    "PipelineResult",
]
