"""
Client-side entry points: form validation and the DashboardClient that
wires the Store, the effect workflows and the data-access collaborator.
"""

from client.forms import ValidationError
from client.dashboard_client import DashboardClient
