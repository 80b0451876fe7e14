"""
Agents Module
Background runners for the deal pipeline
"""

from .pipeline_coordinator import PipelineCoordinator, group_by_destination

__all__ = ["PipelineCoordinator", "group_by_destination"]
