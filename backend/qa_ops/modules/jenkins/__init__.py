"""Jenkins-metrics collector: tracked jobs, collected builds and derived metrics."""
