# src/pipewright/cli/__init__.py
