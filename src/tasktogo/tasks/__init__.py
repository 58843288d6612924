"""
Task subsystem.

Components:
- task_models.py: task kinds (OneShotTask, EventualTask, RecurrenceSchedule,
  RecurringOccurrence) and the completion tracker
- recurrence.py: occurrence due times and expansion
- priority.py: nice values and display order
- registry.py: in-memory collection of task containers
- task_store.py: JSON file persistence
"""
