"""Input adapters for coverage traces, summaries and test results."""
