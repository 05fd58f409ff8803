"""GitHub issue automation bot.

Plugins that react to GitHub webhook deliveries:
- release-issues: when a scheduled release issue is closed, open the next one two weeks later
- auto-closer: on a scheduled scan, close stale issues with a label and an explanatory comment
"""

__version__ = "1.0.0"
