"""Data types and client interfaces used during cell evacuation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol, Sequence


@dataclass(frozen=True)
class LogConfig:
    """Logging identity of a container's workload."""

    guid: str = ""
    source_name: str = ""
    index: int = 0
    tags: dict[str, str] = field(default_factory=dict)

    def source_name_and_tags(self) -> tuple[str, dict[str, str]]:
        """Return the log source name and the tags to attach to app logs."""
        tags = dict(self.tags)
        tags["source_id"] = self.guid
        tags["instance_id"] = str(self.index)
        return self.source_name, tags


@dataclass(frozen=True)
class Container:
    """A container as reported by the executor."""

    guid: str
    state: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    log_config: LogConfig = field(default_factory=LogConfig)


class Presence(enum.Enum):
    """Where an actual LRP instance stands relative to its cell."""

    ORDINARY = "ORDINARY"
    EVACUATING = "EVACUATING"
    SUSPECT = "SUSPECT"


@dataclass(frozen=True)
class ActualLRP:
    """A running instance of a long-running process."""

    process_guid: str
    index: int
    cell_id: str = ""
    presence: Presence = Presence.ORDINARY


@dataclass(frozen=True)
class ActualLRPFilter:
    """Criteria for selecting actual LRPs."""

    cell_id: str = ""


class ExecutorClient(Protocol):
    """Access to the containers on this cell."""

    def list_containers(self) -> Sequence[Container]:
        """Return the containers currently on the cell."""
        ...

    def delete_container(self, trace_id: str, guid: str) -> None:
        """Delete the container with the given guid."""
        ...


class BBSClient(Protocol):
    """Access to the cluster's record of actual LRPs."""

    def actual_lrps(self, trace_id: str, lrp_filter: ActualLRPFilter) -> Sequence[ActualLRP]:
        """Return the actual LRPs that match the filter."""
        ...


class IngressClient(Protocol):
    """Sink for metrics and application logs."""

    def send_metric(self, name: str, value: int) -> None:
        """Emit a metric value."""
        ...

    def send_app_log(self, message: str, source_name: str, tags: dict[str, str]) -> None:
        """Emit an application log line."""
        ...