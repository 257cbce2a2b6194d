"""Application layer - scheduling logic independent of any adapter."""
