"""
External APIs Module for the Monitoring Dashboard

- Monitoring backend: overview envelopes, paginated station reports,
  PDF/spreadsheet exports
"""

from .hydromon_client import HydroMonitorClient, HydroMonitorAPIError

__all__ = ['HydroMonitorClient', 'HydroMonitorAPIError']
