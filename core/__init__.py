"""
Core session state package for FocusHub.

Contains the headless DashboardSession (core.engine), the mode and
navigation controllers, the error types and the JSON storage helpers.
Zero UI dependencies.
"""
