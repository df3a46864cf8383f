"""
Orchestration core: task registry, file-set resolution, data model and ports.
"""
