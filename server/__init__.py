"""
Simulated backend used as the dashboard's data-access collaborator.
"""

from server.mock_api import MockApi, ApiError
