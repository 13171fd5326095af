"""Weekly game domain services: week clock, lifecycle, admission, scheduler.

This package contains the domain logic imported by HTTP routes, CLI
commands and the background scheduler, keeping transport concerns
separated from the weekly game rules.
"""
