"""Stale git branch cleanup tool.

Features:
- Find local branches whose last commit is older than a threshold
- Find stale branches that only exist on GitHub
- Skip branches that still have an open pull request
- Interactive numbered selection with confirmation before deletion
- Branch exclusion patterns
- Dry-run mode
"""

__version__ = "0.1.0"
