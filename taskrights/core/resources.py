from dataclasses import dataclass
from typing import Any, Optional

from taskrights.database.models.enums import ResourceType


@dataclass(frozen=True)
class ResourceRef:
    type: ResourceType
    id: Any

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"


@dataclass(frozen=True)
class ResourceInfo:
    """What the resource loader knows about one resource: its owner and parent."""

    ref: ResourceRef
    owner_id: Any
    parent: Optional[ResourceRef] = None


def project(project_id) -> ResourceRef:
    return ResourceRef(ResourceType.PROJECT, project_id)


def bucket(bucket_id) -> ResourceRef:
    return ResourceRef(ResourceType.BUCKET, bucket_id)


def task(task_id) -> ResourceRef:
    return ResourceRef(ResourceType.TASK, task_id)


def saved_filter(filter_id) -> ResourceRef:
    return ResourceRef(ResourceType.SAVED_FILTER, filter_id)
