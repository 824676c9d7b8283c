"""HTTP API for TubeBrief."""
