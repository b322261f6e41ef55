"""bridgedrop — claim commitments and address prediction for the bridged token deployer."""

__version__ = "0.1.0"
