"""
A batch image minification dispatcher.

This package resolves input files, glob patterns or a piped byte stream into
work items, runs every item through an ordered chain of transformation
plugins and delivers the transformed bytes to stdout, to an output directory
or back over the source file.

The package is organized into several categories:
- Plugin registry and built-in optimizer plugins (gifsicle, jpegtran, optipng, svgo).
- Dispatch: input resolution, the transform runner, the output router and
  the concurrent batch orchestrator.
- Utility functions for configuration, logging, subprocess execution and
  glob expansion.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
