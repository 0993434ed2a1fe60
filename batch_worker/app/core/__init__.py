SERVICE_NAME = "batch-worker"
