"""Deployment engine — planning, verification and parameter assembly."""

from bridgedrop.engine.assembler import assemble_parameters
from bridgedrop.engine.planner import plan_deployment
from bridgedrop.engine.verifier import verify_expected_addresses

__all__ = ["assemble_parameters", "plan_deployment", "verify_expected_addresses"]
