"""
Task subsystem.

Components:
- assignment.py: least-loaded assignee selection for a domain
- deadline_monitor.py: overdue sweep, polling loop and its background runner
- task_api.py: task creation/status/listing helpers used by connectors
"""
