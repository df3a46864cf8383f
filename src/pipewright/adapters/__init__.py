# src/pipewright/adapters/__init__.py
