"""Command-line interface modules for video2bas.

This package contains core execution logic, making scripts/ optional and deletable.
"""

from video2bas.cli.run_video2bas import run_video2bas_pipeline, main

__all__ = ['run_video2bas_pipeline', 'main']
