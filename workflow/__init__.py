"""
Effect workflows — latest-wins request handling on top of the Store.

Users import EffectCoordinator, WorkflowHandle and WorkflowStatus, plus
register_sagas to wire the standard categories to a data-access client.
"""

from workflow.engine import EffectCoordinator, WorkflowHandle, WorkflowStatus, describe_error
from workflow.sagas import register_sagas, settle_delays

__all__ = [
    "EffectCoordinator", "WorkflowHandle", "WorkflowStatus", "describe_error",
    "register_sagas", "settle_delays",
]
