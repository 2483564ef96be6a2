"""Default configuration parameters for the gavcoin sync client."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RpcParams:
    """Remote node connection parameters."""
    url: str = "http://127.0.0.1:8545"
    timeout_seconds: float = 10.0
    poll_interval_seconds: float = 1.0           # eth_blockNumber poll period
    max_poll_failures: int = 5                   # Consecutive failures before the stream is lost


@dataclass(frozen=True)
class RegistryParams:
    """Name registry lookup parameters."""
    contract_name: str = "gavcoin"
    category_tag: str = "A"


@dataclass(frozen=True)
class DisplayParams:
    """Fixed-point scaling and display formatting."""
    token_decimals: int = 6                      # Token base units per whole token = 10^6
    native_decimals: int = 18                    # Wei per ether
    token_places: int = 6
    native_places: int = 3
    unnamed_label: str = "Unnamed"


@dataclass(frozen=True)
class SyncParams:
    """Synchronization pass policy."""
    reject_stale_passes: bool = False            # Monotonic block gating instead of last-writer-wins


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class SessionConfig:
    """Complete session configuration."""
    rpc: RpcParams
    registry: RegistryParams
    display: DisplayParams
    sync: SyncParams
    logging: LoggingParams


def get_default_config() -> SessionConfig:
    """Get the default configuration instance."""
    return SessionConfig(
        rpc=RpcParams(),
        registry=RegistryParams(),
        display=DisplayParams(),
        sync=SyncParams(),
        logging=LoggingParams(),
    )
