"""tasktogo: a personal task list with one-shot, eventual and recurring tasks."""

__version__ = "0.3.0"
