"""
Northwind Analytics
Configuration Module
"""
from .settings import MonitoringSettings, ReportSettings, Settings, get_settings

__all__ = ["MonitoringSettings", "ReportSettings", "Settings", "get_settings"]
