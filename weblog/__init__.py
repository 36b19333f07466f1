"""weblog-reports: partitioned access-log analysis with fixed reports."""
