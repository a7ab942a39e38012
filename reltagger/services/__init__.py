"""Services: git operations, build cache, release tool."""
