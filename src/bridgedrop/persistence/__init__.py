"""Claims input and artifact output."""

from bridgedrop.persistence.artifacts import ArtifactWriter, ShardLimits, verify_output_dir
from bridgedrop.persistence.claims_csv import load_claims, parse_claim_rows

__all__ = ["ArtifactWriter", "ShardLimits", "load_claims", "parse_claim_rows", "verify_output_dir"]
