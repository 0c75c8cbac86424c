"""Nano Try-On: session orchestration for guided virtual try-on."""

__version__ = "1.0.0"
