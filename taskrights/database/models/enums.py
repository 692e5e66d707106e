from enum import Enum


class ResourceType(str, Enum):
    PROJECT = "project"
    BUCKET = "bucket"
    TASK = "task"
    SAVED_FILTER = "saved_filter"
    PROJECT_USER = "project_user"
    PROJECT_TEAM = "project_team"


class GranteeKind(str, Enum):
    USER = "user"
    TEAM = "team"


class ActorKind(str, Enum):
    USER = "user"
    LINK_SHARE = "link_share"


# Child type -> parent type. Types missing here are top level.
NESTING = {
    ResourceType.BUCKET: ResourceType.PROJECT,
    ResourceType.TASK: ResourceType.PROJECT,
    ResourceType.PROJECT_USER: ResourceType.PROJECT,
    ResourceType.PROJECT_TEAM: ResourceType.PROJECT,
}
