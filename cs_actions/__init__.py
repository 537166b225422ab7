"""
Connector actions for workflow orchestration.

Each action is a self-contained operation plugin that receives string inputs,
talks to one third-party system and returns a string result map.
"""

__version__ = "1.0.0"
