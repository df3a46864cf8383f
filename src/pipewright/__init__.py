"""pipewright: build-and-test orchestration for a dual-artifact JavaScript library."""

__version__ = "0.1.0"
