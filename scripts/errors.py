"""Exceptions raised by the deployment scripts."""


class DeployError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigNotFound(DeployError, FileNotFoundError):
    """Raised when no configuration file exists for the requested network."""

    pass


class ConfigParseError(DeployError, ValueError):
    """Raised when a configuration file is not a valid deployment config."""

    pass


class MissingEnvironment(DeployError, ValueError):
    """Raised when a required environment value is not configured."""

    pass


class UnresolvedDependency(DeployError, LookupError):
    """Raised when a constructor argument references a contract not deployed yet."""

    pass


class ArtifactNotFound(DeployError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be located."""

    pass


class ChainSubmissionError(DeployError):
    """Raised when the node rejects or reverts a submitted transaction."""

    pass


class ChainConfirmationTimeout(DeployError, TimeoutError):
    """Raised when a submitted transaction is not confirmed in time."""

    pass


class PersistenceError(DeployError, OSError):
    """Raised when deployed addresses cannot be written to disk."""

    pass


class DeploymentsNotFound(DeployError, FileNotFoundError):
    """Raised when a network has no deployments file."""

    pass


class ContractNotDeployed(DeployError, LookupError):
    """Raised when a contract address is missing from a deployments file."""

    pass
