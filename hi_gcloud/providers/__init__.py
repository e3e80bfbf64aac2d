"""gcloud CLI access."""
