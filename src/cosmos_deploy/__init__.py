"""
cosmos-deploy - deployment pipeline for the Cosmos Hub dashboard.

Runs the fixed install → build → test → commit → push → document sequence
against a Cosmos Hub checkout, stopping at the first failure.
"""

__version__ = "0.1.0"
