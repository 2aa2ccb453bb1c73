"""CRM backend: leads, clients, deals, tasks and their timelines."""

__version__ = "0.1.0"
