"""
Core application engine for running a remote job.

The `JobOrchestrator` drives a single job through submission, polling,
download and saving, and publishes its progress on a `StatusReporter`.
"""
