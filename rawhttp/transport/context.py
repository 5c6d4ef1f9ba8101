"""Context object shared across worker threads."""

from dataclasses import dataclass, field

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.storage import FileStorage


@dataclass
class WorkerContext:
    """Read-only dependencies handed to every connection worker."""

    storage: FileStorage
    config: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_config(cls, config: ServerConfig) -> "WorkerContext":
        return cls(storage=FileStorage(config.directory), config=config)
