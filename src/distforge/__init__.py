"""
distforge - build, package and publish orchestration through assets

distforge discovers asset executables (disters, publishers, docker builders),
learns the tasks they provide and exposes them as one command tree.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
