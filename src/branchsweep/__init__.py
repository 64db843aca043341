"""Git branch cleanup tool.

Features:
- Detect the default and current branch of a repository
- List local and remote branches
- Plan a cleanup that never touches protected branches
- Safe deletion that refuses unmerged branches
- Force option for unmerged branches
- Remote branch deletion through the configured remote
"""

__version__ = "0.1.0"
