"""
Entry point for running DocTrans-LLMs as a module.

Usage:
    python -m doctrans_llms --help
    python -m doctrans_llms translate --text "Hello" --backend dummy
    python -m doctrans_llms formats
"""
from .cli import app


if __name__ == "__main__":
    app()
