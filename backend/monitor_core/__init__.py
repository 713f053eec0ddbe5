"""Core portfolio monitoring logic: indicators, diffing, alerts, retention.

This package contains pure business logic with no I/O dependencies
(no database, Redis, or network access). The running service in
``monitor/`` feeds it data fetched from collaborators and persists
whatever it returns.
"""
